"""Tests for the store transaction helper, store constraints and input re-validation."""

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from conftest import NOW, STUDENTS, add_user
from core.database import init_db
from core.exceptions import DuplicateError, StoreError, ValidationError
from models.batch import BatchModel
from models.diary_entry import DiaryEntryModel
from models.student_profile import STUDENT_CODE_SEQUENCE, SequenceModel, StudentProfileModel
from models.ticket import LeaveRequestModel
from models.user import UserModel
from schemas.ticket import CreateLeaveRequest
from utils.store import transaction
from utils.user_manager import UserManager
from utils.validation import validate_fields


def make_batch(batch_id, end="2026-06-30"):
    return BatchModel(
        id=batch_id,
        name="Temp",
        course_code="01",
        start_date=date(2026, 1, 1),
        end_date=date.fromisoformat(end),
        created_at=NOW.isoformat(),
        updated_at=NOW.isoformat(),
    )


class TestTransaction:

    def test_commits(self, db):
        with transaction(db, "create batch"):
            db.add(make_batch("temp-1"))
        assert db.get(BatchModel, "temp-1") is not None

    def test_constraint_violation_is_store_error(self, db):
        with pytest.raises(StoreError):
            with transaction(db, "create batch"):
                db.add(make_batch("temp-2", end="2025-01-01"))
        assert db.get(BatchModel, "temp-2") is None

    def test_constraint_mapped_to_domain_error(self, db):
        with pytest.raises(DuplicateError):
            with transaction(db, "create batch", lambda exc: DuplicateError("exists")):
                db.add(make_batch("batch-1"))

    def test_driver_failure_is_store_error(self, db):
        with pytest.raises(StoreError) as excinfo:
            with transaction(db, "do work"):
                raise OperationalError("SELECT 1", {}, Exception("connection lost"))
        assert excinfo.value.category.value == "unavailable"

    def test_domain_errors_roll_back_and_propagate(self, db):
        with pytest.raises(DuplicateError):
            with transaction(db, "create batch"):
                db.add(make_batch("temp-3"))
                db.flush()
                raise DuplicateError("stop")
        assert db.get(BatchModel, "temp-3") is None


class TestValidateFields:

    def test_errors_name_fields(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_fields(CreateLeaveRequest, {"leave_type": "sick", "reason": "Fever, 3 days"})
        assert excinfo.value.errors == [{"field": "leave_date", "message": "Field required"}]
        assert excinfo.value.to_dict()["category"] == "input"

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            validate_fields(
                CreateLeaveRequest,
                {
                    "leave_date": "2026-03-20",
                    "leave_type": "sick",
                    "reason": "Fever, 3 days",
                    "status": "approved",
                },
            )

    def test_strips_whitespace(self):
        data = validate_fields(
            CreateLeaveRequest,
            {"leave_date": "2026-03-20", "leave_type": "sick", "reason": "  Fever, 3 days  "},
        )
        assert data.reason == "Fever, 3 days"


class TestStoreConstraints:

    def test_unknown_role_rejected(self, db):
        add_user(db, "odd-role", "superuser")
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_unknown_profile_status_rejected(self, db):
        with pytest.raises(IntegrityError):
            db.query(StudentProfileModel).update({"status": "bogus"})
        db.rollback()

    def test_unknown_leave_status_rejected(self, db):
        db.add(
            LeaveRequestModel(
                id="leave-1",
                user_id=STUDENTS[0],
                leave_date=date(2026, 3, 20),
                leave_type="sick",
                reason="Fever, 3 days",
                created_at=NOW.isoformat(),
            )
        )
        db.commit()
        with pytest.raises(IntegrityError):
            db.query(LeaveRequestModel).update({"status": "bogus"})
        db.rollback()
        assert db.get(LeaveRequestModel, "leave-1").status == "pending"

    def test_orphan_reference_rejected_at_commit(self, db):
        db.add(
            DiaryEntryModel(
                id="entry-1",
                user_id="nobody",
                week_number=1,
                entry_date=date(2026, 3, 10),
                work_description="Nobody wrote this entry.",
                hours_worked=2,
                created_at=NOW.isoformat(),
                updated_at=NOW.isoformat(),
            )
        )
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()
        assert db.get(DiaryEntryModel, "entry-1") is None


class TestSequences:

    def test_counter_seeded_once(self, engine, db):
        init_db(bind=engine)
        rows = db.query(SequenceModel).all()
        assert [(row.name, row.value) for row in rows] == [(STUDENT_CODE_SEQUENCE, 0)]

    def test_missing_counter_is_store_error(self, db, clock):
        db.query(SequenceModel).delete()
        db.commit()
        with pytest.raises(StoreError):
            UserManager(db, clock=clock).register_student(
                "new-student", {"full_name": "Asha Rao", "email": "asha@example.com"}
            )
        assert db.get(UserModel, "new-student") is None
