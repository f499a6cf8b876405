"""Batch management utilities.

A batch is "yet to start" before its start date, "completed" after its end
date, and "ongoing" (active) on any day within ``[start_date, end_date]``.
"""

import logging
import secrets
from datetime import date
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from core.exceptions import IneligibleError, NotFoundError, ValidationError
from models.batch import BatchModel
from models.user import UserRoleModel
from schemas.batch import CreateBatchRequest, UpdateBatchRequest
from utils.authorization import AuthorizationResolver, Capability, Role
from utils.store import transaction
from utils.timeutils import Clock, utc_now, utc_today
from utils.validation import validate_fields

logger = logging.getLogger(__name__)


class BatchStatus(str, Enum):
    YET_TO_START = "yet_to_start"
    ONGOING = "ongoing"
    COMPLETED = "completed"


def batch_status(batch: BatchModel, today: date) -> BatchStatus:
    if today < batch.start_date:
        return BatchStatus.YET_TO_START
    if today > batch.end_date:
        return BatchStatus.COMPLETED
    return BatchStatus.ONGOING


def filter_active(batches: Iterable[BatchModel], today: date) -> List[BatchModel]:
    """Batches that have not completed yet (upcoming or ongoing)."""
    return [b for b in batches if batch_status(b, today) is not BatchStatus.COMPLETED]


def filter_ongoing(batches: Iterable[BatchModel], today: date) -> List[BatchModel]:
    return [b for b in batches if batch_status(b, today) is BatchStatus.ONGOING]


def filter_completed(batches: Iterable[BatchModel], today: date) -> List[BatchModel]:
    return [b for b in batches if batch_status(b, today) is BatchStatus.COMPLETED]


class BatchManager:
    """Manages batches and their faculty assignment."""

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.auth = AuthorizationResolver(db)

    def today(self) -> date:
        return utc_today(self.clock)

    def get_batch(self, batch_id: str) -> BatchModel:
        model = self.db.get(BatchModel, batch_id)
        if model is None:
            raise NotFoundError("Batch", batch_id)
        return model

    def create_batch(self, requester_id: str, fields: Mapping[str, Any]) -> BatchModel:
        """Create a batch. Admin only.

        Raises:
            ValidationError: If fields are malformed or end precedes start.
            IneligibleError: If the assigned faculty is not a faculty subject.
        """
        self.auth.require(requester_id, Capability.MANAGE_BATCHES)
        data = validate_fields(CreateBatchRequest, fields)
        if data.assigned_faculty_id:
            self._require_faculty(data.assigned_faculty_id)
        now = self.clock().isoformat()
        model = BatchModel(
            id=secrets.token_hex(8),
            name=data.name,
            description=data.description,
            course_code=data.course_code,
            start_date=data.start_date,
            end_date=data.end_date,
            assigned_faculty_id=data.assigned_faculty_id,
            created_at=now,
            updated_at=now,
        )
        with transaction(self.db, "create batch"):
            self.db.add(model)
        self.db.refresh(model)
        logger.info("Created batch %s (%s) by %s", model.id, model.name, requester_id)
        return model

    def update_batch(
        self, requester_id: str, batch_id: str, fields: Mapping[str, Any]
    ) -> BatchModel:
        self.auth.require(requester_id, Capability.MANAGE_BATCHES)
        data = validate_fields(UpdateBatchRequest, fields)
        model = self.get_batch(batch_id)
        patch = data.model_dump(exclude_unset=True)
        for required in ("name", "course_code", "start_date", "end_date"):
            if required in patch and patch[required] is None:
                del patch[required]
        start = patch.get("start_date", model.start_date)
        end = patch.get("end_date", model.end_date)
        if end < start:
            raise ValidationError(
                "end_date must not be before start_date",
                [{"field": "end_date", "message": "must not be before start_date"}],
            )
        with transaction(self.db, "update batch"):
            for name, value in patch.items():
                setattr(model, name, value)
            model.updated_at = self.clock().isoformat()
        self.db.refresh(model)
        return model

    def assign_faculty(
        self, requester_id: str, batch_id: str, faculty_id: Optional[str]
    ) -> BatchModel:
        """Assign a faculty subject to a batch, or clear it with ``None``."""
        self.auth.require(requester_id, Capability.MANAGE_BATCHES)
        model = self.get_batch(batch_id)
        if faculty_id is not None:
            self._require_faculty(faculty_id)
        with transaction(self.db, "assign batch faculty"):
            model.assigned_faculty_id = faculty_id
            model.updated_at = self.clock().isoformat()
        self.db.refresh(model)
        logger.info("Batch %s assigned to faculty %s by %s", batch_id, faculty_id, requester_id)
        return model

    def list_batches(self, requester_id: str) -> List[BatchModel]:
        """List batches visible to the requester.

        Admins see every batch, faculty only their assigned batches.
        """
        caps = self.auth.require(requester_id, Capability.VIEW_BATCHES)
        query = self.db.query(BatchModel)
        if caps.batch_scope is not None:
            query = query.filter(BatchModel.id.in_(caps.batch_scope))
        return query.order_by(BatchModel.start_date.desc()).all()

    def _require_faculty(self, subject_id: str) -> None:
        role = self.db.get(UserRoleModel, subject_id)
        if role is None or role.role != Role.FACULTY.value:
            raise IneligibleError(f"Subject '{subject_id}' is not a faculty member")
