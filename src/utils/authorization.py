"""Capability resolution for portal subjects.

A subject's capabilities are derived from its role and, for students, the
approval status of its student profile. ``AuthorizationResolver`` reads both
from the store on every call, so a status change made by an admin between two
actions is observed by the very next action.

Resolution is fail-closed: a subject without a role record gets the empty
capability set.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from sqlalchemy.orm import Session

from core.exceptions import UnauthorizedError
from models.batch import BatchModel
from models.student_profile import StudentProfileModel
from models.user import UserRoleModel

logger = logging.getLogger(__name__)


class Role(str, Enum):
    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"


class StudentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Capability(str, Enum):
    # Available to every registered student, whatever the approval status
    VIEW_OWN_PROFILE = "profile:view_own"
    VIEW_OWN_DASHBOARD = "dashboard:view_own"
    UPDATE_OWN_PROFILE = "profile:update_own"

    # Approved-student self service
    WRITE_DIARY = "diary:write_own"
    VIEW_OWN_DIARY = "diary:view_own"
    CREATE_LEAVE = "leave:create"
    VIEW_OWN_LEAVES = "leave:view_own"
    CREATE_QUERY = "query:create"
    VIEW_OWN_QUERIES = "query:view_own"
    CREATE_PROJECT = "project:create"
    JOIN_PROJECT = "project:join"
    MANAGE_OWN_PROJECT = "project:manage_own"
    VIEW_OWN_PROJECTS = "project:view_own"
    SEARCH_STUDENTS = "student:search"
    VIEW_BATCH_RESOURCES = "resource:view_batch"
    SUBMIT_ASSIGNMENT = "assignment:submit"

    # Staff reads (faculty: scoped to assigned batches)
    VIEW_BATCHES = "batch:view"
    VIEW_STUDENTS = "student:view"
    VIEW_DIARIES = "diary:view"
    VIEW_PROJECTS = "project:view"
    VIEW_LEAVES = "leave:view"
    VIEW_RESOURCES = "resource:view"
    VIEW_ASSIGNMENTS = "assignment:view"

    # Staff writes
    MANAGE_RESOURCES = "resource:manage"
    MANAGE_ASSIGNMENTS = "assignment:manage"

    # Administration
    REVIEW_STUDENTS = "student:review"
    MANAGE_STUDENTS = "student:manage"
    REVIEW_LEAVES = "leave:review"
    VIEW_QUERIES = "query:view"
    RESOLVE_QUERIES = "query:resolve"
    MANAGE_BATCHES = "batch:manage"
    MANAGE_FACULTY = "faculty:manage"
    LOCK_DIARY = "diary:lock"
    MANAGE_ALL_RESOURCES = "resource:manage_all"


UNAPPROVED_STUDENT_CAPABILITIES: FrozenSet[Capability] = frozenset(
    {
        Capability.VIEW_OWN_PROFILE,
        Capability.VIEW_OWN_DASHBOARD,
        Capability.UPDATE_OWN_PROFILE,
    }
)

APPROVED_STUDENT_CAPABILITIES: FrozenSet[Capability] = UNAPPROVED_STUDENT_CAPABILITIES | {
    Capability.WRITE_DIARY,
    Capability.VIEW_OWN_DIARY,
    Capability.CREATE_LEAVE,
    Capability.VIEW_OWN_LEAVES,
    Capability.CREATE_QUERY,
    Capability.VIEW_OWN_QUERIES,
    Capability.CREATE_PROJECT,
    Capability.JOIN_PROJECT,
    Capability.MANAGE_OWN_PROJECT,
    Capability.VIEW_OWN_PROJECTS,
    Capability.SEARCH_STUDENTS,
    Capability.VIEW_BATCH_RESOURCES,
    Capability.SUBMIT_ASSIGNMENT,
}

FACULTY_CAPABILITIES: FrozenSet[Capability] = frozenset(
    {
        Capability.VIEW_OWN_PROFILE,
        Capability.VIEW_OWN_DASHBOARD,
        Capability.UPDATE_OWN_PROFILE,
        Capability.VIEW_BATCHES,
        Capability.VIEW_STUDENTS,
        Capability.VIEW_DIARIES,
        Capability.VIEW_PROJECTS,
        Capability.VIEW_LEAVES,
        Capability.VIEW_RESOURCES,
        Capability.VIEW_ASSIGNMENTS,
        Capability.MANAGE_RESOURCES,
        Capability.MANAGE_ASSIGNMENTS,
    }
)

# Admins hold everything except the student self-service writes, which only
# make sense for a subject that owns a student profile.
ADMIN_CAPABILITIES: FrozenSet[Capability] = frozenset(Capability) - (
    APPROVED_STUDENT_CAPABILITIES - UNAPPROVED_STUDENT_CAPABILITIES
) | {Capability.SEARCH_STUDENTS}


@dataclass(frozen=True)
class CapabilitySet:
    """What one subject may do, resolved for the current request.

    ``batch_scope`` is ``None`` for unrestricted subjects (admins). Faculty
    get their assigned batches, students the batch on their profile.
    """

    subject_id: Optional[str]
    role: Optional[Role]
    student_status: Optional[StudentStatus]
    capabilities: FrozenSet[Capability]
    batch_scope: Optional[FrozenSet[str]] = frozenset()

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def require(self, capability: Capability) -> "CapabilitySet":
        """Return self if the capability is held, else raise.

        Raises:
            UnauthorizedError: If the capability is missing.
        """
        if capability not in self.capabilities:
            logger.warning(
                "Subject %s (role=%s, status=%s) denied %s",
                self.subject_id,
                self.role.value if self.role else None,
                self.student_status.value if self.student_status else None,
                capability.value,
            )
            raise UnauthorizedError(f"Not allowed: {capability.value}")
        return self

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_faculty(self) -> bool:
        return self.role is Role.FACULTY

    @property
    def is_approved_student(self) -> bool:
        return self.role is Role.STUDENT and self.student_status is StudentStatus.APPROVED

    def can_read_batch(self, batch_id: Optional[str]) -> bool:
        if self.batch_scope is None:
            return True
        return batch_id is not None and batch_id in self.batch_scope


def empty_capabilities(subject_id: Optional[str] = None) -> CapabilitySet:
    return CapabilitySet(
        subject_id=subject_id,
        role=None,
        student_status=None,
        capabilities=frozenset(),
    )


def _coerce(enum_cls, value):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def resolve_capabilities(
    role,
    student_status=None,
    batch_scope: Optional[Iterable[str]] = None,
    subject_id: Optional[str] = None,
) -> CapabilitySet:
    """Derive the capability set from role and student approval status.

    Args:
        role: ``Role`` or its string value. ``None`` or unknown yields the
            empty set.
        student_status: Approval status, only consulted for students.
        batch_scope: Batch ids the subject is scoped to (faculty assignments
            or the student's batch). Ignored for admins.
        subject_id: Subject the set is resolved for.

    Returns:
        The resolved CapabilitySet.
    """
    role = _coerce(Role, role)
    if role is None:
        return empty_capabilities(subject_id)

    scope = frozenset(b for b in (batch_scope or ()) if b)
    if role is Role.ADMIN:
        return CapabilitySet(subject_id, role, None, ADMIN_CAPABILITIES, batch_scope=None)
    if role is Role.FACULTY:
        return CapabilitySet(subject_id, role, None, FACULTY_CAPABILITIES, batch_scope=scope)

    status = _coerce(StudentStatus, student_status)
    if status is StudentStatus.APPROVED:
        caps = APPROVED_STUDENT_CAPABILITIES
    else:
        caps = UNAPPROVED_STUDENT_CAPABILITIES
    return CapabilitySet(subject_id, role, status, caps, batch_scope=scope)


class AuthorizationResolver:
    """Loads role, status and batch scope fresh from the store."""

    def __init__(self, db: Session):
        self.db = db

    def for_subject(self, subject_id: Optional[str]) -> CapabilitySet:
        if not subject_id:
            return empty_capabilities()
        role_row = (
            self.db.query(UserRoleModel)
            .filter(UserRoleModel.user_id == subject_id)
            .first()
        )
        if role_row is None:
            return empty_capabilities(subject_id)

        status = None
        scope = []
        if role_row.role == Role.STUDENT.value:
            profile = (
                self.db.query(StudentProfileModel)
                .filter(StudentProfileModel.user_id == subject_id)
                .first()
            )
            if profile is not None:
                status = profile.status
                scope = [profile.batch_id]
        elif role_row.role == Role.FACULTY.value:
            scope = [
                batch_id
                for (batch_id,) in self.db.query(BatchModel.id)
                .filter(BatchModel.assigned_faculty_id == subject_id)
                .all()
            ]
        return resolve_capabilities(role_row.role, status, scope, subject_id)

    def require(self, subject_id: Optional[str], capability: Capability) -> CapabilitySet:
        """Resolve the subject and require one capability in a single step."""
        return self.for_subject(subject_id).require(capability)
