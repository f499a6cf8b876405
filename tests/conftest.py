"""
Pytest fixtures for the internship portal test suite.

Provides:
- An in-memory SQLite store, fresh for every test
- Seeded subjects: an admin, a faculty member, six approved students in one
  batch (A-F), an approved student in another batch, a pending student, and
  on request a rejected student
- A controllable clock for the time-dependent rules
- A FastAPI TestClient wired to the same store, with bearer tokens minted the
  way the identity provider would
"""

import os

# Configure before any project module reads the environment
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["ADMIN_TOKEN"] = "test-admin-token"

from datetime import date, datetime, timedelta

import pytest
import pytz
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import sessionmaker

from core.database import build_engine, get_db, init_db
from models.batch import BatchModel
from models.student_profile import StudentProfileModel
from models.user import UserModel, UserRoleModel

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=pytz.utc)

ADMIN_ID = "admin-1"
FACULTY_ID = "faculty-1"
BATCH_ID = "batch-1"
OTHER_BATCH_ID = "batch-2"
STUDENTS = ["student-a", "student-b", "student-c", "student-d", "student-e", "student-f"]
OTHER_BATCH_STUDENT = "student-x"
PENDING_STUDENT = "student-p"
REJECTED_STUDENT = "student-r"


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# =============================================================================
# Store fixtures
# =============================================================================


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory, seeded):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# Seed data
# =============================================================================


def add_user(session, user_id, role, phone=None, full_name=None):
    stamp = NOW.isoformat()
    session.add(
        UserModel(
            user_id=user_id,
            full_name=full_name or user_id.replace("-", " ").title(),
            email=f"{user_id}@example.com",
            phone=phone,
            created_at=stamp,
            updated_at=stamp,
        )
    )
    session.add(UserRoleModel(user_id=user_id, role=role, assigned_at=stamp))


def add_student(session, user_id, status="approved", batch_id=BATCH_ID, phone=None):
    add_user(session, user_id, "student", phone=phone)
    stamp = NOW.isoformat()
    profile = StudentProfileModel(
        id=f"profile-{user_id}",
        user_id=user_id,
        student_code=f"CODE-{user_id}",
        status=status,
        batch_id=batch_id,
        created_at=stamp,
        updated_at=stamp,
    )
    session.add(profile)
    return profile


@pytest.fixture
def seeded(session_factory):
    session = session_factory()
    stamp = NOW.isoformat()
    add_user(session, ADMIN_ID, "admin")
    add_user(session, FACULTY_ID, "faculty")
    session.add_all(
        [
            BatchModel(
                id=BATCH_ID,
                name="Spring AI/ML",
                course_code="01",
                start_date=date(2026, 1, 5),
                end_date=date(2026, 6, 30),
                assigned_faculty_id=FACULTY_ID,
                created_at=stamp,
                updated_at=stamp,
            ),
            BatchModel(
                id=OTHER_BATCH_ID,
                name="Spring VLSI",
                course_code="02",
                start_date=date(2026, 1, 5),
                end_date=date(2026, 6, 30),
                created_at=stamp,
                updated_at=stamp,
            ),
        ]
    )
    for index, student_id in enumerate(STUDENTS):
        add_student(session, student_id, phone=f"98765432{index:02d}")
    add_student(session, OTHER_BATCH_STUDENT, batch_id=OTHER_BATCH_ID, phone="9000000001")
    add_student(session, PENDING_STUDENT, status="pending", phone="9000000002")
    session.commit()
    session.close()
    return True


@pytest.fixture
def rejected_student(db):
    add_student(db, REJECTED_STUDENT, status="rejected", phone="9000000003")
    db.commit()
    return REJECTED_STUDENT


# =============================================================================
# API fixtures
# =============================================================================


def make_token(subject_id: str) -> str:
    """Mint a bearer token the way the identity provider does."""
    claims = {"sub": subject_id, "exp": datetime.now(pytz.utc) + timedelta(hours=1)}
    return jwt.encode(claims, os.environ["JWT_SECRET_KEY"], algorithm="HS256")


def auth_headers(subject_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(subject_id)}"}


@pytest.fixture
def client(session_factory, seeded):
    from app import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
