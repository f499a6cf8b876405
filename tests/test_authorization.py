"""Tests for capability resolution."""

import pytest

from conftest import ADMIN_ID, BATCH_ID, FACULTY_ID, OTHER_BATCH_ID, PENDING_STUDENT, STUDENTS
from core.exceptions import UnauthorizedError
from models.student_profile import StudentProfileModel
from utils.authorization import (
    AuthorizationResolver,
    Capability,
    Role,
    StudentStatus,
    resolve_capabilities,
)

STUDENT_WRITES = [
    Capability.WRITE_DIARY,
    Capability.CREATE_LEAVE,
    Capability.CREATE_QUERY,
    Capability.CREATE_PROJECT,
    Capability.JOIN_PROJECT,
    Capability.MANAGE_OWN_PROJECT,
    Capability.SUBMIT_ASSIGNMENT,
]


class TestResolveCapabilities:
    """Pure role/status -> capability derivation."""

    def test_missing_role_is_empty(self):
        caps = resolve_capabilities(None)
        assert caps.capabilities == frozenset()
        with pytest.raises(UnauthorizedError):
            caps.require(Capability.VIEW_OWN_DASHBOARD)

    def test_unknown_role_is_empty(self):
        assert resolve_capabilities("superuser").capabilities == frozenset()

    @pytest.mark.parametrize("status", ["pending", "rejected", None])
    def test_unapproved_student_limited_to_own_profile_and_dashboard(self, status):
        caps = resolve_capabilities(Role.STUDENT, status)
        assert caps.has(Capability.VIEW_OWN_PROFILE)
        assert caps.has(Capability.VIEW_OWN_DASHBOARD)
        for capability in STUDENT_WRITES:
            assert not caps.has(capability)

    def test_approved_student_gets_self_service(self):
        caps = resolve_capabilities("student", "approved", [BATCH_ID])
        for capability in STUDENT_WRITES:
            assert caps.has(capability)
        assert not caps.has(Capability.REVIEW_STUDENTS)
        assert caps.is_approved_student

    def test_faculty_reads_scoped_to_batches(self):
        caps = resolve_capabilities(Role.FACULTY, batch_scope=[BATCH_ID])
        assert caps.has(Capability.VIEW_DIARIES)
        assert caps.has(Capability.MANAGE_RESOURCES)
        assert not caps.has(Capability.REVIEW_LEAVES)
        assert not caps.has(Capability.WRITE_DIARY)
        assert caps.can_read_batch(BATCH_ID)
        assert not caps.can_read_batch(OTHER_BATCH_ID)
        assert not caps.can_read_batch(None)

    def test_admin_unscoped(self):
        caps = resolve_capabilities(Role.ADMIN)
        assert caps.is_admin
        assert caps.has(Capability.REVIEW_STUDENTS)
        assert caps.has(Capability.RESOLVE_QUERIES)
        assert caps.can_read_batch(OTHER_BATCH_ID)
        assert not caps.has(Capability.WRITE_DIARY)


class TestAuthorizationResolver:
    """Capabilities are read from the store on every call."""

    def test_unknown_subject_fails_closed(self, db):
        caps = AuthorizationResolver(db).for_subject("nobody")
        assert caps.capabilities == frozenset()
        assert caps.subject_id == "nobody"

    def test_no_subject_fails_closed(self, db):
        assert AuthorizationResolver(db).for_subject(None).capabilities == frozenset()

    def test_faculty_scope_from_assigned_batches(self, db):
        caps = AuthorizationResolver(db).for_subject(FACULTY_ID)
        assert caps.batch_scope == frozenset({BATCH_ID})

    def test_admin_resolved(self, db):
        assert AuthorizationResolver(db).for_subject(ADMIN_ID).is_admin

    def test_status_change_observed_on_next_call(self, db):
        resolver = AuthorizationResolver(db)
        assert resolver.for_subject(STUDENTS[0]).has(Capability.WRITE_DIARY)

        profile = db.query(StudentProfileModel).filter_by(user_id=STUDENTS[0]).one()
        profile.status = StudentStatus.REJECTED.value
        db.commit()

        with pytest.raises(UnauthorizedError):
            resolver.require(STUDENTS[0], Capability.WRITE_DIARY)

    def test_pending_student_denied(self, db):
        with pytest.raises(UnauthorizedError):
            AuthorizationResolver(db).require(PENDING_STUDENT, Capability.CREATE_LEAVE)
