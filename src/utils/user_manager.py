"""User management utilities.

This module provides subject registration, role assignment, student code
generation, and profile maintenance. Credentials are handled by the external
identity provider; this module only ever sees its subject ids.
"""

import logging
import secrets
from typing import Any, List, Mapping, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from config import ADMIN_TOKEN, DEFAULT_COURSE_CODE, STUDENT_CODE_PREFIX
from core.exceptions import DuplicateError, NotFoundError, StoreError, UnauthorizedError
from models.batch import BatchModel
from models.student_profile import STUDENT_CODE_SEQUENCE, SequenceModel, StudentProfileModel
from models.user import UserModel, UserRoleModel
from schemas.user import (
    AdminRegisterRequest,
    CreateFacultyRequest,
    RegisterRequest,
    StudentRegisterRequest,
    UpdateProfileRequest,
)
from utils.authorization import AuthorizationResolver, Capability, Role, StudentStatus
from utils.store import transaction
from utils.timeutils import Clock, utc_now
from utils.validation import validate_fields

logger = logging.getLogger(__name__)


class UserManager:
    """Manages subject registration and profile data using SQLAlchemy."""

    def __init__(self, db: Session, clock: Clock = utc_now):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            clock: Returns the current aware UTC datetime.
        """
        self.db = db
        self.clock = clock
        self.auth = AuthorizationResolver(db)

    def register_student(
        self, subject_id: str, fields: Mapping[str, Any]
    ) -> Tuple[UserModel, StudentProfileModel]:
        """Register a subject as a student awaiting approval.

        Creates the user row, the one-time ``student`` role assignment and a
        ``pending`` student profile carrying a freshly generated student code.

        Args:
            subject_id: Subject id issued by the identity provider.
            fields: Raw registration fields (see StudentRegisterRequest).

        Returns:
            Tuple of the created UserModel and StudentProfileModel.

        Raises:
            ValidationError: If fields are malformed.
            DuplicateError: If the subject already has a role.
            NotFoundError: If the referenced batch does not exist.
        """
        data = validate_fields(StudentRegisterRequest, fields)
        course_code = DEFAULT_COURSE_CODE
        if data.batch_id:
            batch = self.db.get(BatchModel, data.batch_id)
            if batch is None:
                raise NotFoundError("Batch", data.batch_id)
            course_code = batch.course_code

        now = self.clock()
        with transaction(self.db, "register student", self._duplicate_role(subject_id)):
            user = self._create_identity(subject_id, data, Role.STUDENT)
            profile = StudentProfileModel(
                id=secrets.token_hex(8),
                user_id=subject_id,
                student_code=self._next_student_code(course_code),
                usn=data.usn,
                college_name=data.college_name,
                branch=data.branch,
                internship_role=data.internship_role,
                skill_level=data.skill_level,
                status=StudentStatus.PENDING.value,
                batch_id=data.batch_id,
                created_at=now.isoformat(),
                updated_at=now.isoformat(),
            )
            self.db.add(profile)
        logger.info(
            "Registered student %s with code %s (pending approval)",
            subject_id,
            profile.student_code,
        )
        return user, profile

    def register_admin(self, subject_id: str, fields: Mapping[str, Any]) -> UserModel:
        """Register an administrator.

        Requires ``ADMIN_TOKEN`` to be configured and supplied.

        Raises:
            UnauthorizedError: If the admin token is missing or wrong.
            DuplicateError: If the subject already has a role.
        """
        data = validate_fields(AdminRegisterRequest, fields)
        if not ADMIN_TOKEN or not secrets.compare_digest(data.admin_token, ADMIN_TOKEN):
            logger.warning("Rejected admin registration for %s: bad admin token", subject_id)
            raise UnauthorizedError("Invalid admin token")
        with transaction(self.db, "register admin", self._duplicate_role(subject_id)):
            user = self._create_identity(subject_id, data, Role.ADMIN)
        logger.info("Registered admin %s", subject_id)
        return user

    def create_faculty(self, requester_id: str, fields: Mapping[str, Any]) -> UserModel:
        """Create a faculty subject. Admin only."""
        self.auth.require(requester_id, Capability.MANAGE_FACULTY)
        data = validate_fields(CreateFacultyRequest, fields)
        with transaction(self.db, "create faculty", self._duplicate_role(data.user_id)):
            user = self._create_identity(data.user_id, data, Role.FACULTY)
        logger.info("Admin %s created faculty %s", requester_id, data.user_id)
        return user

    def list_faculty(self, requester_id: str) -> List[UserModel]:
        self.auth.require(requester_id, Capability.MANAGE_FACULTY)
        return (
            self.db.query(UserModel)
            .join(UserRoleModel, UserRoleModel.user_id == UserModel.user_id)
            .filter(UserRoleModel.role == Role.FACULTY.value)
            .order_by(UserModel.full_name)
            .all()
        )

    def get_user(self, subject_id: str) -> UserModel:
        model = self.db.get(UserModel, subject_id)
        if model is None:
            raise NotFoundError("User", subject_id)
        return model

    def get_role(self, subject_id: str) -> Optional[str]:
        row = self.db.get(UserRoleModel, subject_id)
        return row.role if row else None

    def get_student_profile(self, subject_id: str) -> Optional[StudentProfileModel]:
        return (
            self.db.query(StudentProfileModel)
            .filter(StudentProfileModel.user_id == subject_id)
            .first()
        )

    def update_profile(self, subject_id: str, fields: Mapping[str, Any]) -> UserModel:
        """Update the subject's own contact profile.

        Args:
            subject_id: Subject updating its own profile.
            fields: Partial profile fields (see UpdateProfileRequest).

        Returns:
            Updated UserModel.
        """
        self.auth.require(subject_id, Capability.UPDATE_OWN_PROFILE)
        data = validate_fields(UpdateProfileRequest, fields)
        model = self.get_user(subject_id)
        patch = data.model_dump(exclude_unset=True)
        if patch.get("linkedin_url") is not None:
            patch["linkedin_url"] = str(patch["linkedin_url"])
        if "full_name" in patch and patch["full_name"] is None:
            del patch["full_name"]
        with transaction(self.db, "update profile"):
            for name, value in patch.items():
                setattr(model, name, value)
            model.updated_at = self.clock().isoformat()
        self.db.refresh(model)
        return model

    def find_by_phone(self, requester_id: str, phone: str) -> UserModel:
        """Look up a student by phone number, for adding project members.

        Raises:
            UnauthorizedError: If the requester may not search students.
            NotFoundError: If no student has that phone number.
        """
        self.auth.require(requester_id, Capability.SEARCH_STUDENTS)
        phone = (phone or "").strip()
        model = (
            self.db.query(UserModel)
            .join(UserRoleModel, UserRoleModel.user_id == UserModel.user_id)
            .filter(UserModel.phone == phone, UserRoleModel.role == Role.STUDENT.value)
            .first()
        )
        if model is None:
            raise NotFoundError("Student with phone", phone)
        return model

    def _create_identity(self, subject_id: str, data: RegisterRequest, role: Role) -> UserModel:
        if self.db.get(UserRoleModel, subject_id) is not None:
            raise DuplicateError(f"Subject '{subject_id}' already has a role")
        now = self.clock().isoformat()
        user = self.db.get(UserModel, subject_id)
        if user is None:
            user = UserModel(
                user_id=subject_id,
                full_name=data.full_name,
                email=str(data.email),
                phone=data.phone,
                created_at=now,
                updated_at=now,
            )
            self.db.add(user)
        self.db.add(UserRoleModel(user_id=subject_id, role=role.value, assigned_at=now))
        self.db.flush()
        return user

    def _next_student_code(self, course_code: str) -> str:
        """Format the next student code, e.g. ``FEST0126001``."""
        year = self.clock().strftime("%y")
        return f"{STUDENT_CODE_PREFIX}{course_code}{year}{self._next_sequence_value(STUDENT_CODE_SEQUENCE):03d}"

    def _next_sequence_value(self, name: str) -> int:
        result = self.db.execute(
            update(SequenceModel)
            .where(SequenceModel.name == name)
            .values(value=SequenceModel.value + 1)
        )
        if result.rowcount == 0:
            # Counter rows are seeded by init_db
            logger.error("Sequence '%s' is missing from the store", name)
            raise StoreError(f"Sequence '{name}' is not initialised")
        return self.db.execute(
            select(SequenceModel.value).where(SequenceModel.name == name)
        ).scalar_one()

    @staticmethod
    def _duplicate_role(subject_id: str):
        return lambda exc: DuplicateError(f"Subject '{subject_id}' is already registered")
