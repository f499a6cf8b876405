"""Custom exception classes for the Internship Portal domain engine.

Every failure an engine operation can report is one of the classes below.
Callers catch by type; ``code`` is stable and machine-readable, and
``category`` tells the presentation layer whether to ask the user to fix
their input, deny access, report a conflict, or suggest trying again later.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCategory(str, Enum):
    """Message category surfaced to the presentation layer."""

    INPUT = "input"
    ACCESS = "access"
    CONFLICT = "conflict"
    MISSING = "missing"
    UNAVAILABLE = "unavailable"


class InternshipPortalError(Exception):
    """Base exception for all Internship Portal errors."""

    code = "portal_error"
    category = ErrorCategory.UNAVAILABLE

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "category": self.category.value,
            "detail": self.message,
        }


class ValidationError(InternshipPortalError):
    """Raised when input fields fail validation."""

    code = "validation_error"
    category = ErrorCategory.INPUT

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        """Initialize the exception.

        Args:
            message: Human readable summary.
            errors: Optional per-field errors, each ``{"field", "message"}``.
        """
        self.errors = errors or []
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = self.errors
        return payload


class UnauthorizedError(InternshipPortalError):
    """Raised when the caller lacks the capability for an operation."""

    code = "unauthorized"
    category = ErrorCategory.ACCESS


class IneligibleError(InternshipPortalError):
    """Raised when a subject is not eligible, e.g. batch mismatch on join."""

    code = "ineligible"
    category = ErrorCategory.ACCESS


class InvalidTransitionError(InternshipPortalError):
    """Raised when a state machine transition is not allowed."""

    code = "invalid_transition"
    category = ErrorCategory.CONFLICT

    def __init__(self, entity: str, entity_id: str, current_state: str, target_state: str):
        self.entity = entity
        self.entity_id = entity_id
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            f"{entity} '{entity_id}' cannot move from '{current_state}' to '{target_state}'"
        )


class DuplicateError(InternshipPortalError):
    """Raised when a uniqueness invariant would be violated."""

    code = "duplicate"
    category = ErrorCategory.CONFLICT


class CapacityError(InternshipPortalError):
    """Raised when a project already holds the maximum number of members."""

    code = "capacity_exceeded"
    category = ErrorCategory.CONFLICT

    def __init__(self, project_id: str, limit: int):
        self.project_id = project_id
        self.limit = limit
        super().__init__(f"Project '{project_id}' already has {limit} members")


class LockedError(InternshipPortalError):
    """Raised when a record's edit window has closed."""

    code = "locked"
    category = ErrorCategory.CONFLICT


class NotFoundError(InternshipPortalError):
    """Raised when a referenced entity does not exist."""

    code = "not_found"
    category = ErrorCategory.MISSING

    def __init__(self, entity: str, entity_id: str):
        """Initialize the exception.

        Args:
            entity: Entity name, e.g. ``"Project"``.
            entity_id: The ID that was not found.
        """
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class StoreError(InternshipPortalError):
    """Raised when the entity store fails (network, constraint, driver)."""

    code = "store_error"
    category = ErrorCategory.UNAVAILABLE
