"""Ticket review workflows: leave requests and admin queries.

Both follow the same shape. The owner opens a ticket; an admin moves it to a
terminal state, stamping who did it and when. Terminal states are one-way.
Transitions are conditional UPDATEs guarded by the open state, so a ticket
can only be closed once even when two reviewers act at the same time.
"""

import logging
import secrets
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from models.student_profile import StudentProfileModel
from models.ticket import AdminQueryModel, LeaveRequestModel
from schemas.ticket import CreateAdminQueryRequest, CreateLeaveRequest
from utils.authorization import AuthorizationResolver, Capability
from utils.store import transaction
from utils.timeutils import Clock, utc_now
from utils.validation import validate_fields

logger = logging.getLogger(__name__)

LEAVE_PENDING = "pending"
LEAVE_DECISIONS = ("approved", "rejected")


class TicketWorkflow:
    """Shared open -> terminal mechanics for ticket models."""

    model = None
    entity = "Ticket"

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.auth = AuthorizationResolver(db)

    def get_ticket(self, ticket_id: str):
        model = self.db.get(self.model, ticket_id)
        if model is None:
            raise NotFoundError(self.entity, ticket_id)
        return model

    def list_own(self, owner_id: str, capability: Capability) -> List:
        self.auth.require(owner_id, capability)
        return (
            self.db.query(self.model)
            .filter(self.model.user_id == owner_id)
            .order_by(self.model.created_at.desc())
            .all()
        )

    def _close(
        self,
        ticket_id: str,
        open_clause,
        values: Dict[str, Any],
        current_state,
        target_state: str,
    ):
        ticket = self.get_ticket(ticket_id)
        with transaction(self.db, f"close {self.entity}"):
            result = self.db.execute(
                update(self.model)
                .where(self.model.id == ticket_id, open_clause)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.db.refresh(ticket)
                raise InvalidTransitionError(
                    self.entity, ticket_id, current_state(ticket), target_state
                )
        self.db.refresh(ticket)
        return ticket


class LeaveManager(TicketWorkflow):
    """Leave requests: ``pending -> approved | rejected``."""

    model = LeaveRequestModel
    entity = "LeaveRequest"

    def create_request(self, owner_id: str, fields: Mapping[str, Any]) -> LeaveRequestModel:
        """Open a leave request.

        Fields are validated before anything is written, so a short reason
        never produces a row.

        Raises:
            UnauthorizedError: If the owner is not an approved student.
            ValidationError: If the reason is shorter than 10 characters or
                other fields are malformed.
        """
        self.auth.require(owner_id, Capability.CREATE_LEAVE)
        data = validate_fields(CreateLeaveRequest, fields)
        model = LeaveRequestModel(
            id=secrets.token_hex(8),
            user_id=owner_id,
            leave_date=data.leave_date,
            leave_type=data.leave_type,
            reason=data.reason,
            status=LEAVE_PENDING,
            created_at=self.clock().isoformat(),
        )
        with transaction(self.db, "create leave request"):
            self.db.add(model)
        self.db.refresh(model)
        logger.info("Leave request %s opened by %s for %s", model.id, owner_id, model.leave_date)
        return model

    def review(self, ticket_id: str, decision: str, reviewer_id: str) -> LeaveRequestModel:
        """Approve or reject a pending leave request.

        Raises:
            UnauthorizedError: If the reviewer is not an admin.
            ValidationError: If the decision is not approved/rejected.
            NotFoundError: If the request does not exist.
            InvalidTransitionError: If the request was already reviewed.
        """
        self.auth.require(reviewer_id, Capability.REVIEW_LEAVES)
        if decision not in LEAVE_DECISIONS:
            raise ValidationError(
                "Decision must be approved or rejected",
                [{"field": "decision", "message": f"unexpected value {decision!r}"}],
            )
        ticket = self._close(
            ticket_id,
            LeaveRequestModel.status == LEAVE_PENDING,
            {
                "status": decision,
                "reviewed_by": reviewer_id,
                "reviewed_at": self.clock().isoformat(),
            },
            lambda t: t.status,
            decision,
        )
        logger.info("Leave request %s %s by %s", ticket_id, decision, reviewer_id)
        return ticket

    def list_own_requests(self, owner_id: str) -> List[LeaveRequestModel]:
        return self.list_own(owner_id, Capability.VIEW_OWN_LEAVES)

    def list_requests(
        self, requester_id: str, status: Optional[str] = None
    ) -> List[LeaveRequestModel]:
        """All leave requests for admins; assigned-batch students for faculty."""
        caps = self.auth.require(requester_id, Capability.VIEW_LEAVES)
        query = self.db.query(LeaveRequestModel)
        if status:
            query = query.filter(LeaveRequestModel.status == status)
        if caps.batch_scope is not None:
            query = query.join(
                StudentProfileModel, StudentProfileModel.user_id == LeaveRequestModel.user_id
            ).filter(StudentProfileModel.batch_id.in_(caps.batch_scope))
        return query.order_by(LeaveRequestModel.created_at.desc()).all()


class QueryManager(TicketWorkflow):
    """Admin queries: ``open -> resolved``."""

    model = AdminQueryModel
    entity = "AdminQuery"

    def create_query(self, owner_id: str, fields: Mapping[str, Any]) -> AdminQueryModel:
        """Open a query to the administration.

        Raises:
            UnauthorizedError: If the owner is not an approved student.
            ValidationError: If title (3+) or description (20+) is too short.
        """
        self.auth.require(owner_id, Capability.CREATE_QUERY)
        data = validate_fields(CreateAdminQueryRequest, fields)
        model = AdminQueryModel(
            id=secrets.token_hex(8),
            user_id=owner_id,
            title=data.title,
            category=data.category,
            description=data.description,
            is_resolved=False,
            created_at=self.clock().isoformat(),
        )
        with transaction(self.db, "create admin query"):
            self.db.add(model)
        self.db.refresh(model)
        logger.info("Admin query %s opened by %s", model.id, owner_id)
        return model

    def resolve(self, ticket_id: str, resolver_id: str) -> AdminQueryModel:
        self.auth.require(resolver_id, Capability.RESOLVE_QUERIES)
        ticket = self._close(
            ticket_id,
            AdminQueryModel.is_resolved.is_(False),
            {
                "is_resolved": True,
                "resolved_by": resolver_id,
                "resolved_at": self.clock().isoformat(),
            },
            lambda t: "resolved" if t.is_resolved else "open",
            "resolved",
        )
        logger.info("Admin query %s resolved by %s", ticket_id, resolver_id)
        return ticket

    def list_own_queries(self, owner_id: str) -> List[AdminQueryModel]:
        return self.list_own(owner_id, Capability.VIEW_OWN_QUERIES)

    def list_queries(
        self, requester_id: str, resolved: Optional[bool] = None
    ) -> List[AdminQueryModel]:
        self.auth.require(requester_id, Capability.VIEW_QUERIES)
        query = self.db.query(AdminQueryModel)
        if resolved is not None:
            query = query.filter(AdminQueryModel.is_resolved.is_(resolved))
        return query.order_by(AdminQueryModel.created_at.desc()).all()
