"""Tests for leave request and admin query review workflows."""

import pytest

from conftest import ADMIN_ID, FACULTY_ID, OTHER_BATCH_STUDENT, PENDING_STUDENT, STUDENTS
from core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from models.ticket import AdminQueryModel, LeaveRequestModel
from utils.review_manager import LeaveManager, QueryManager

OWNER = STUDENTS[0]


def leave_fields(**overrides):
    fields = {"leave_date": "2026-03-20", "leave_type": "sick", "reason": "Fever, 3 days"}
    fields.update(overrides)
    return fields


def query_fields(**overrides):
    fields = {
        "title": "Lab access",
        "category": "schedule",
        "description": "The lab is closed during our scheduled hours.",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def leaves(db, clock):
    return LeaveManager(db, clock=clock)


@pytest.fixture
def queries(db, clock):
    return QueryManager(db, clock=clock)


class TestLeaveRequests:

    def test_short_reason_persists_nothing(self, leaves, db):
        """A 5 character reason fails; 10 characters succeeds as pending."""
        with pytest.raises(ValidationError) as excinfo:
            leaves.create_request(OWNER, leave_fields(reason="Flu!!"))
        assert excinfo.value.errors[0]["field"] == "reason"
        assert db.query(LeaveRequestModel).count() == 0

        request = leaves.create_request(OWNER, leave_fields(reason="Flu, sorry"))
        assert request.status == "pending"
        assert request.reviewed_by is None
        assert db.query(LeaveRequestModel).count() == 1

    def test_unknown_leave_type(self, leaves):
        with pytest.raises(ValidationError):
            leaves.create_request(OWNER, leave_fields(leave_type="vacation"))

    def test_pending_student_denied(self, leaves):
        with pytest.raises(UnauthorizedError):
            leaves.create_request(PENDING_STUDENT, leave_fields())

    def test_rejected_student_denied(self, leaves, rejected_student):
        with pytest.raises(UnauthorizedError):
            leaves.create_request(rejected_student, leave_fields())

    def test_faculty_cannot_file_leave(self, leaves):
        with pytest.raises(UnauthorizedError):
            leaves.create_request(FACULTY_ID, leave_fields())
        with pytest.raises(UnauthorizedError):
            leaves.list_own_requests(FACULTY_ID)

    @pytest.mark.parametrize("decision", ["approved", "rejected"])
    def test_review_stamps_reviewer(self, leaves, clock, decision):
        request = leaves.create_request(OWNER, leave_fields())
        reviewed = leaves.review(request.id, decision, ADMIN_ID)
        assert reviewed.status == decision
        assert reviewed.reviewed_by == ADMIN_ID
        assert reviewed.reviewed_at == clock.now.isoformat()

    def test_terminal_states_are_one_way(self, leaves):
        request = leaves.create_request(OWNER, leave_fields())
        leaves.review(request.id, "approved", ADMIN_ID)
        with pytest.raises(InvalidTransitionError) as excinfo:
            leaves.review(request.id, "rejected", ADMIN_ID)
        assert excinfo.value.current_state == "approved"
        assert leaves.get_ticket(request.id).status == "approved"

    def test_faculty_cannot_review(self, leaves):
        request = leaves.create_request(OWNER, leave_fields())
        with pytest.raises(UnauthorizedError):
            leaves.review(request.id, "approved", FACULTY_ID)

    def test_bad_decision(self, leaves):
        request = leaves.create_request(OWNER, leave_fields())
        with pytest.raises(ValidationError):
            leaves.review(request.id, "pending", ADMIN_ID)

    def test_missing_request(self, leaves):
        with pytest.raises(NotFoundError):
            leaves.review("missing", "approved", ADMIN_ID)

    def test_listing(self, leaves):
        leaves.create_request(OWNER, leave_fields())
        leaves.create_request(OTHER_BATCH_STUDENT, leave_fields())
        assert [r.user_id for r in leaves.list_own_requests(OWNER)] == [OWNER]
        assert len(leaves.list_requests(ADMIN_ID)) == 2
        assert [r.user_id for r in leaves.list_requests(FACULTY_ID)] == [OWNER]
        assert leaves.list_requests(ADMIN_ID, status="approved") == []
        with pytest.raises(UnauthorizedError):
            leaves.list_requests(OWNER)


class TestAdminQueries:

    def test_create_open(self, queries):
        query = queries.create_query(OWNER, query_fields())
        assert query.is_resolved is False
        assert query.resolved_by is None

    def test_rejected_student_denied(self, queries, rejected_student):
        with pytest.raises(UnauthorizedError):
            queries.create_query(rejected_student, query_fields())

    @pytest.mark.parametrize(
        "overrides",
        [{"title": "Hi"}, {"description": "Too short to act on"}, {"category": "misc"}],
    )
    def test_validation_before_persistence(self, queries, db, overrides):
        with pytest.raises(ValidationError):
            queries.create_query(OWNER, query_fields(**overrides))
        assert db.query(AdminQueryModel).count() == 0

    def test_resolve_once(self, queries, clock):
        query = queries.create_query(OWNER, query_fields())
        resolved = queries.resolve(query.id, ADMIN_ID)
        assert resolved.is_resolved is True
        assert resolved.resolved_by == ADMIN_ID
        assert resolved.resolved_at == clock.now.isoformat()
        with pytest.raises(InvalidTransitionError) as excinfo:
            queries.resolve(query.id, ADMIN_ID)
        assert excinfo.value.current_state == "resolved"

    def test_only_admin_resolves(self, queries):
        query = queries.create_query(OWNER, query_fields())
        with pytest.raises(UnauthorizedError):
            queries.resolve(query.id, OWNER)

    def test_listing(self, queries):
        first = queries.create_query(OWNER, query_fields())
        queries.create_query(STUDENTS[1], query_fields())
        queries.resolve(first.id, ADMIN_ID)
        assert len(queries.list_own_queries(OWNER)) == 1
        assert len(queries.list_queries(ADMIN_ID)) == 2
        assert [q.id for q in queries.list_queries(ADMIN_ID, resolved=True)] == [first.id]
        assert len(queries.list_queries(ADMIN_ID, resolved=False)) == 1
