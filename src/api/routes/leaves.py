"""Leave request routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_subject_id
from core.dependencies import LeaveManagerDep
from schemas.ticket import CreateLeaveRequest, LeaveRequest, ReviewLeaveRequest

router = APIRouter(prefix="/api/leaves", tags=["Leave"])


@router.post("", response_model=LeaveRequest, summary="Request leave")
def create_leave_request(
    req: CreateLeaveRequest,
    leave_manager: LeaveManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> LeaveRequest:
    model = leave_manager.create_request(subject_id, req.model_dump(mode="json"))
    return LeaveRequest.model_validate(model)


@router.get("", response_model=List[LeaveRequest], summary="List my leave requests")
def list_my_leave_requests(
    leave_manager: LeaveManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> List[LeaveRequest]:
    return [
        LeaveRequest.model_validate(model)
        for model in leave_manager.list_own_requests(subject_id)
    ]


@router.get("/all", response_model=List[LeaveRequest], summary="List leave requests")
def list_leave_requests(
    leave_manager: LeaveManagerDep,
    status: Optional[str] = None,
    subject_id: str = Depends(get_current_subject_id),
) -> List[LeaveRequest]:
    """List leave requests for review.

    Admins see every request; faculty see requests from their batches.
    """
    return [
        LeaveRequest.model_validate(model)
        for model in leave_manager.list_requests(subject_id, status)
    ]


@router.post("/{leave_id}/review", response_model=LeaveRequest, summary="Review leave request")
def review_leave_request(
    leave_id: str,
    req: ReviewLeaveRequest,
    leave_manager: LeaveManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> LeaveRequest:
    model = leave_manager.review(leave_id, req.decision, subject_id)
    return LeaveRequest.model_validate(model)
