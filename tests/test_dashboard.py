"""Tests for per-role dashboard summaries."""

import pytest

from conftest import ADMIN_ID, FACULTY_ID, OTHER_BATCH_STUDENT, PENDING_STUDENT, STUDENTS
from core.exceptions import UnauthorizedError
from utils.dashboard_manager import DashboardManager
from utils.diary_manager import DiaryManager
from utils.project_manager import ProjectManager
from utils.review_manager import LeaveManager


@pytest.fixture
def dashboard(db, clock):
    return DashboardManager(db, clock=clock)


def test_pending_student_sees_only_status(dashboard):
    summary = dashboard.summary(PENDING_STUDENT)
    assert summary == {"role": "student", "status": "pending", "student_code": "CODE-student-p"}


def test_approved_student_counts(dashboard, db, clock):
    DiaryManager(db, clock=clock).create_entry(
        STUDENTS[0],
        {
            "entry_date": "2026-03-10",
            "work_description": "Wrote the data loaders.",
            "hours_worked": 5,
        },
    )
    LeaveManager(db, clock=clock).create_request(
        STUDENTS[0], {"leave_date": "2026-03-20", "leave_type": "casual", "reason": "Family event"}
    )
    summary = dashboard.summary(STUDENTS[0])
    assert summary["diary_entries"] == 1
    assert summary["diary_hours"] == 5
    assert summary["pending_leaves"] == 1
    assert summary["open_queries"] == 0
    assert summary["projects"] == 0


def test_admin_counts(dashboard):
    summary = dashboard.summary(ADMIN_ID)
    assert summary["pending_approvals"] == 1
    assert summary["approved_students"] == 7
    assert summary["batches"] == {"yet_to_start": 0, "ongoing": 2, "completed": 0}


def test_faculty_counts(dashboard):
    assert dashboard.summary(FACULTY_ID) == {
        "role": "faculty",
        "batches": 1,
        "students": 6,
        "diary_entries": 0,
        "projects": 0,
        "leave_requests": 0,
        "pending_leaves": 0,
    }


def test_faculty_counts_cover_assigned_batches_only(dashboard, db, clock):
    diary = DiaryManager(db, clock=clock)
    leaves = LeaveManager(db, clock=clock)
    for student in (STUDENTS[0], OTHER_BATCH_STUDENT):
        diary.create_entry(
            student,
            {
                "entry_date": "2026-03-10",
                "work_description": "Cleaned the survey data.",
                "hours_worked": 4,
            },
        )
        leaves.create_request(
            student, {"leave_date": "2026-03-20", "leave_type": "sick", "reason": "Fever, 3 days"}
        )
        ProjectManager(db, clock=clock).create_project(student, f"Project of {student}")
    leave = leaves.list_own_requests(STUDENTS[0])[0]
    leaves.review(leave.id, "approved", ADMIN_ID)

    summary = dashboard.summary(FACULTY_ID)
    assert summary["diary_entries"] == 1
    assert summary["projects"] == 1
    assert summary["leave_requests"] == 1
    assert summary["pending_leaves"] == 0


def test_unknown_subject(dashboard):
    with pytest.raises(UnauthorizedError):
        dashboard.summary("nobody")
