"""Tests for batch status and batch administration."""

from datetime import date
from types import SimpleNamespace

import pytest

from conftest import ADMIN_ID, BATCH_ID, FACULTY_ID, OTHER_BATCH_ID, STUDENTS
from core.exceptions import IneligibleError, NotFoundError, UnauthorizedError, ValidationError
from utils.batch_manager import (
    BatchManager,
    BatchStatus,
    batch_status,
    filter_active,
    filter_completed,
    filter_ongoing,
)


def make_batch(start, end):
    return SimpleNamespace(start_date=start, end_date=end)


@pytest.fixture
def batches(db, clock):
    return BatchManager(db, clock=clock)


class TestBatchStatus:

    @pytest.mark.parametrize(
        "today, expected",
        [
            (date(2026, 1, 4), BatchStatus.YET_TO_START),
            (date(2026, 1, 5), BatchStatus.ONGOING),
            (date(2026, 6, 30), BatchStatus.ONGOING),
            (date(2026, 7, 1), BatchStatus.COMPLETED),
        ],
    )
    def test_boundaries_inclusive(self, today, expected):
        assert batch_status(make_batch(date(2026, 1, 5), date(2026, 6, 30)), today) is expected

    def test_filters(self):
        early = make_batch(date(2025, 1, 1), date(2025, 6, 30))
        current = make_batch(date(2026, 1, 1), date(2026, 6, 30))
        later = make_batch(date(2026, 9, 1), date(2026, 12, 31))
        today = date(2026, 3, 10)
        everything = [early, current, later]
        assert filter_ongoing(everything, today) == [current]
        assert filter_completed(everything, today) == [early]
        assert filter_active(everything, today) == [current, later]


class TestBatchManager:

    def test_create(self, batches):
        batch = batches.create_batch(
            ADMIN_ID,
            {"name": "Autumn MERN", "start_date": "2026-09-01", "end_date": "2026-12-15"},
        )
        assert batch.course_code == "01"
        assert batch_status(batch, batches.today()) is BatchStatus.YET_TO_START

    def test_end_before_start(self, batches):
        with pytest.raises(ValidationError):
            batches.create_batch(
                ADMIN_ID,
                {"name": "Backwards", "start_date": "2026-09-01", "end_date": "2026-08-01"},
            )

    def test_update_keeps_range_valid(self, batches):
        with pytest.raises(ValidationError):
            batches.update_batch(ADMIN_ID, BATCH_ID, {"end_date": "2025-12-31"})
        updated = batches.update_batch(ADMIN_ID, BATCH_ID, {"name": "Spring AI"})
        assert updated.name == "Spring AI"
        assert updated.start_date == date(2026, 1, 5)

    def test_only_admin_manages(self, batches):
        with pytest.raises(UnauthorizedError):
            batches.create_batch(
                FACULTY_ID,
                {"name": "Nope", "start_date": "2026-09-01", "end_date": "2026-12-15"},
            )

    def test_assign_faculty(self, batches):
        batch = batches.assign_faculty(ADMIN_ID, OTHER_BATCH_ID, FACULTY_ID)
        assert batch.assigned_faculty_id == FACULTY_ID
        assert {b.id for b in batches.list_batches(FACULTY_ID)} == {BATCH_ID, OTHER_BATCH_ID}

        batches.assign_faculty(ADMIN_ID, OTHER_BATCH_ID, None)
        assert [b.id for b in batches.list_batches(FACULTY_ID)] == [BATCH_ID]

    def test_assign_non_faculty(self, batches):
        with pytest.raises(IneligibleError):
            batches.assign_faculty(ADMIN_ID, BATCH_ID, STUDENTS[0])

    def test_missing_batch(self, batches):
        with pytest.raises(NotFoundError):
            batches.assign_faculty(ADMIN_ID, "missing", FACULTY_ID)

    def test_students_cannot_list(self, batches):
        with pytest.raises(UnauthorizedError):
            batches.list_batches(STUDENTS[0])
