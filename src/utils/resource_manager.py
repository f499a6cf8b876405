"""Learning resources and assignments for batches.

Admins manage everything; faculty manage material for their assigned batches
and may only change what they created. Approved students read their own
batch's material and submit assignments before the deadline. File contents
live in external storage; only opaque storage paths are recorded here.
"""

import logging
import secrets
from typing import Any, List, Mapping, Optional

from sqlalchemy.orm import Session

from core.exceptions import (
    DuplicateError,
    LockedError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from models.batch import BatchModel
from models.resource import AssignmentModel, AssignmentSubmissionModel, ResourceModel
from schemas.resource import (
    CreateAssignmentRequest,
    CreateResourceRequest,
    SubmitAssignmentRequest,
    UpdateResourceRequest,
)
from utils.authorization import AuthorizationResolver, Capability, CapabilitySet
from utils.store import transaction
from utils.timeutils import Clock, utc_now, utc_today
from utils.validation import validate_fields

logger = logging.getLogger(__name__)


class ResourceManager:
    """Manages batch resources, assignments and submissions."""

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.auth = AuthorizationResolver(db)

    # --- Resources ---

    def get_resource(self, resource_id: str) -> ResourceModel:
        model = self.db.get(ResourceModel, resource_id)
        if model is None:
            raise NotFoundError("Resource", resource_id)
        return model

    def create_resource(self, requester_id: str, fields: Mapping[str, Any]) -> ResourceModel:
        caps = self.auth.require(requester_id, Capability.MANAGE_RESOURCES)
        data = validate_fields(CreateResourceRequest, fields)
        self._require_batch_write(caps, data.batch_id)
        now = self.clock().isoformat()
        model = ResourceModel(
            id=secrets.token_hex(8),
            batch_id=data.batch_id,
            module_number=data.module_number,
            title=data.title,
            description=data.description,
            resource_type=data.resource_type,
            content_url=str(data.content_url) if data.content_url else None,
            content_text=data.content_text,
            file_path=data.file_path,
            created_by=requester_id,
            created_at=now,
            updated_at=now,
        )
        with transaction(self.db, "create resource"):
            self.db.add(model)
        self.db.refresh(model)
        logger.info("Resource %s added to batch %s by %s", model.id, model.batch_id, requester_id)
        return model

    def update_resource(
        self, requester_id: str, resource_id: str, fields: Mapping[str, Any]
    ) -> ResourceModel:
        caps = self.auth.require(requester_id, Capability.MANAGE_RESOURCES)
        model = self.get_resource(resource_id)
        self._require_owner(caps, model.created_by)
        data = validate_fields(UpdateResourceRequest, fields)
        patch = data.model_dump(exclude_unset=True)
        for required in ("module_number", "title", "resource_type"):
            if required in patch and patch[required] is None:
                del patch[required]
        if patch.get("content_url") is not None:
            patch["content_url"] = str(patch["content_url"])
        with transaction(self.db, "update resource"):
            for name, value in patch.items():
                setattr(model, name, value)
            model.updated_at = self.clock().isoformat()
        self.db.refresh(model)
        return model

    def delete_resource(self, requester_id: str, resource_id: str) -> None:
        caps = self.auth.require(requester_id, Capability.MANAGE_RESOURCES)
        model = self.get_resource(resource_id)
        self._require_owner(caps, model.created_by)
        with transaction(self.db, "delete resource"):
            self.db.delete(model)
        logger.info("Deleted resource %s by %s", resource_id, requester_id)

    def list_resources(
        self, requester_id: str, batch_id: Optional[str] = None
    ) -> List[ResourceModel]:
        caps = self._require_batch_read(requester_id, batch_id, Capability.VIEW_RESOURCES)
        query = self.db.query(ResourceModel)
        if batch_id is not None:
            query = query.filter(ResourceModel.batch_id == batch_id)
        elif caps.batch_scope is not None:
            query = query.filter(ResourceModel.batch_id.in_(caps.batch_scope))
        return query.order_by(ResourceModel.module_number, ResourceModel.created_at).all()

    # --- Assignments ---

    def get_assignment(self, assignment_id: str) -> AssignmentModel:
        model = self.db.get(AssignmentModel, assignment_id)
        if model is None:
            raise NotFoundError("Assignment", assignment_id)
        return model

    def create_assignment(self, requester_id: str, fields: Mapping[str, Any]) -> AssignmentModel:
        caps = self.auth.require(requester_id, Capability.MANAGE_ASSIGNMENTS)
        data = validate_fields(CreateAssignmentRequest, fields)
        self._require_batch_write(caps, data.batch_id)
        now = self.clock()
        model = AssignmentModel(
            id=secrets.token_hex(8),
            batch_id=data.batch_id,
            created_by=requester_id,
            assignment_number=data.assignment_number,
            title=data.title,
            description=data.description,
            file_path=data.file_path,
            links=data.links,
            start_date=data.start_date or utc_today(self.clock),
            deadline=data.deadline,
            created_at=now.isoformat(),
            updated_at=now.isoformat(),
        )
        if model.deadline < model.start_date:
            raise ValidationError(
                "deadline must not be before start_date",
                [{"field": "deadline", "message": "must not be before start_date"}],
            )
        with transaction(self.db, "create assignment"):
            self.db.add(model)
        self.db.refresh(model)
        logger.info(
            "Assignment %s for batch %s created by %s", model.id, model.batch_id, requester_id
        )
        return model

    def list_assignments(
        self, requester_id: str, batch_id: Optional[str] = None
    ) -> List[AssignmentModel]:
        caps = self._require_batch_read(requester_id, batch_id, Capability.VIEW_ASSIGNMENTS)
        query = self.db.query(AssignmentModel)
        if batch_id is not None:
            query = query.filter(AssignmentModel.batch_id == batch_id)
        elif caps.batch_scope is not None:
            query = query.filter(AssignmentModel.batch_id.in_(caps.batch_scope))
        return query.order_by(AssignmentModel.assignment_number).all()

    def submit_assignment(
        self, student_id: str, assignment_id: str, fields: Mapping[str, Any]
    ) -> AssignmentSubmissionModel:
        """Record a student's submission.

        Raises:
            UnauthorizedError: If the student is not approved or the
                assignment belongs to another batch.
            LockedError: If the deadline has passed.
            DuplicateError: If the student already submitted.
        """
        caps = self.auth.require(student_id, Capability.SUBMIT_ASSIGNMENT)
        assignment = self.get_assignment(assignment_id)
        if not caps.can_read_batch(assignment.batch_id):
            raise UnauthorizedError("Assignment belongs to another batch")
        if utc_today(self.clock) > assignment.deadline:
            raise LockedError(f"Deadline for assignment '{assignment_id}' has passed")
        data = validate_fields(SubmitAssignmentRequest, fields)
        model = AssignmentSubmissionModel(
            id=secrets.token_hex(8),
            assignment_id=assignment_id,
            student_id=student_id,
            file_path=data.file_path,
            file_name=data.file_name,
            submitted_at=self.clock().isoformat(),
        )

        def duplicate(exc):
            return DuplicateError("Assignment already submitted")

        with transaction(self.db, "submit assignment", on_integrity_error=duplicate):
            self.db.add(model)
        self.db.refresh(model)
        logger.info("Assignment %s submitted by %s", assignment_id, student_id)
        return model

    def list_submissions(
        self, requester_id: str, assignment_id: str
    ) -> List[AssignmentSubmissionModel]:
        caps = self.auth.for_subject(requester_id)
        assignment = self.get_assignment(assignment_id)
        query = self.db.query(AssignmentSubmissionModel).filter(
            AssignmentSubmissionModel.assignment_id == assignment_id
        )
        if caps.has(Capability.VIEW_ASSIGNMENTS) and caps.can_read_batch(assignment.batch_id):
            return query.all()
        caps.require(Capability.SUBMIT_ASSIGNMENT)
        return query.filter(AssignmentSubmissionModel.student_id == requester_id).all()

    # --- Helpers ---

    def _require_batch_write(self, caps: CapabilitySet, batch_id: str) -> None:
        if self.db.get(BatchModel, batch_id) is None:
            raise NotFoundError("Batch", batch_id)
        if not caps.can_read_batch(batch_id):
            raise UnauthorizedError("Batch is outside your assignments")

    def _require_owner(self, caps: CapabilitySet, created_by: str) -> None:
        if caps.has(Capability.MANAGE_ALL_RESOURCES):
            return
        if created_by != caps.subject_id:
            raise UnauthorizedError("You can only change material you created")

    def _require_batch_read(
        self, requester_id: str, batch_id: Optional[str], staff_capability: Capability
    ) -> CapabilitySet:
        caps = self.auth.for_subject(requester_id)
        if not caps.has(staff_capability):
            caps.require(Capability.VIEW_BATCH_RESOURCES)
        if batch_id is not None and not caps.can_read_batch(batch_id):
            raise UnauthorizedError("Batch is outside your scope")
        return caps
