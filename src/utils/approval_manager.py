"""Student approval workflow.

Student profiles move ``pending -> approved`` or ``pending -> rejected``.
Both outcomes are terminal. The transition is a conditional UPDATE guarded by
``status = 'pending'``, so two admins reviewing the same student at once
cannot both succeed.
"""

import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from models.batch import BatchModel
from models.student_profile import StudentProfileModel
from utils.authorization import AuthorizationResolver, Capability, StudentStatus
from utils.store import transaction
from utils.timeutils import Clock, utc_now

logger = logging.getLogger(__name__)

DECISIONS = (StudentStatus.APPROVED.value, StudentStatus.REJECTED.value)


class ApprovalManager:
    """Reviews student registrations."""

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.auth = AuthorizationResolver(db)

    def get_profile(self, profile_id: str) -> StudentProfileModel:
        model = self.db.get(StudentProfileModel, profile_id)
        if model is None:
            raise NotFoundError("StudentProfile", profile_id)
        return model

    def review(self, profile_id: str, decision: str, reviewer_id: str) -> StudentProfileModel:
        """Approve or reject a pending student profile.

        Only the status changes; every other field of the profile is left as
        it was.

        Args:
            profile_id: Student profile to review.
            decision: ``"approved"`` or ``"rejected"``.
            reviewer_id: Subject performing the review.

        Returns:
            The reviewed StudentProfileModel.

        Raises:
            UnauthorizedError: If the reviewer lacks admin capability.
            ValidationError: If the decision is not a terminal status.
            NotFoundError: If the profile does not exist.
            InvalidTransitionError: If the profile is no longer pending.
        """
        self.auth.require(reviewer_id, Capability.REVIEW_STUDENTS)
        decision = getattr(decision, "value", decision)
        if decision not in DECISIONS:
            raise ValidationError(
                f"Decision must be one of {', '.join(DECISIONS)}",
                [{"field": "decision", "message": f"unexpected value {decision!r}"}],
            )
        profile = self.get_profile(profile_id)

        with transaction(self.db, "review student"):
            result = self.db.execute(
                update(StudentProfileModel)
                .where(
                    StudentProfileModel.id == profile_id,
                    StudentProfileModel.status == StudentStatus.PENDING.value,
                )
                .values(status=decision)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.db.refresh(profile)
                raise InvalidTransitionError(
                    "StudentProfile", profile_id, profile.status, decision
                )
        self.db.refresh(profile)
        logger.info(
            "Student profile %s (%s) %s by %s",
            profile_id,
            profile.student_code,
            decision,
            reviewer_id,
        )
        return profile

    def list_profiles(
        self, requester_id: str, status: Optional[str] = None
    ) -> List[StudentProfileModel]:
        """List student profiles, optionally by status.

        Faculty only see students of their assigned batches.
        """
        caps = self.auth.require(requester_id, Capability.VIEW_STUDENTS)
        query = self.db.query(StudentProfileModel)
        if status:
            query = query.filter(StudentProfileModel.status == status)
        if caps.batch_scope is not None:
            query = query.filter(StudentProfileModel.batch_id.in_(caps.batch_scope))
        return query.order_by(StudentProfileModel.created_at.desc()).all()

    def list_pending(self, requester_id: str) -> List[StudentProfileModel]:
        self.auth.require(requester_id, Capability.REVIEW_STUDENTS)
        return self.list_profiles(requester_id, StudentStatus.PENDING.value)

    def assign_batch(
        self, requester_id: str, profile_id: str, batch_id: Optional[str]
    ) -> StudentProfileModel:
        """Place a student in a batch, or remove it with ``None``. Admin only."""
        self.auth.require(requester_id, Capability.MANAGE_STUDENTS)
        profile = self.get_profile(profile_id)
        if batch_id is not None and self.db.get(BatchModel, batch_id) is None:
            raise NotFoundError("Batch", batch_id)
        with transaction(self.db, "assign student batch"):
            profile.batch_id = batch_id
            profile.updated_at = self.clock().isoformat()
        self.db.refresh(profile)
        logger.info("Student profile %s moved to batch %s by %s", profile_id, batch_id, requester_id)
        return profile
