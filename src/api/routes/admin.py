"""Administration routes: student approvals, faculty and batches."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_subject_id
from core.dependencies import ApprovalManagerDep, BatchManagerDep, UserManagerDep
from schemas.batch import AssignFacultyRequest, BatchInfo, CreateBatchRequest, UpdateBatchRequest
from schemas.user import (
    AssignBatchRequest,
    CreateFacultyRequest,
    ReviewStudentRequest,
    StudentProfile,
    User,
)
from utils.batch_manager import batch_status

router = APIRouter(prefix="/api/admin", tags=["Admin"])


def _build_batch_info(model, today) -> BatchInfo:
    info = BatchInfo.model_validate(model)
    info.status = batch_status(model, today).value
    return info


# --- Student approvals ---


@router.get("/students", response_model=List[StudentProfile], summary="List students")
def list_students(
    approval_manager: ApprovalManagerDep,
    status: Optional[str] = None,
    subject_id: str = Depends(get_current_subject_id),
) -> List[StudentProfile]:
    models = approval_manager.list_profiles(subject_id, status)
    return [StudentProfile.model_validate(model) for model in models]


@router.get(
    "/approvals", response_model=List[StudentProfile], summary="List pending registrations"
)
def list_pending_students(
    approval_manager: ApprovalManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> List[StudentProfile]:
    models = approval_manager.list_pending(subject_id)
    return [StudentProfile.model_validate(model) for model in models]


@router.post(
    "/approvals/{profile_id}", response_model=StudentProfile, summary="Approve or reject"
)
def review_student(
    profile_id: str,
    req: ReviewStudentRequest,
    approval_manager: ApprovalManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> StudentProfile:
    """Approve or reject a pending student registration.

    Args:
        profile_id: Student profile to review.
        req: Review decision.
        approval_manager: Injected ApprovalManager instance.
        subject_id: Reviewing admin.

    Returns:
        The reviewed StudentProfile.
    """
    model = approval_manager.review(profile_id, req.decision, subject_id)
    return StudentProfile.model_validate(model)


@router.put(
    "/students/{profile_id}/batch", response_model=StudentProfile, summary="Assign batch"
)
def assign_student_batch(
    profile_id: str,
    req: AssignBatchRequest,
    approval_manager: ApprovalManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> StudentProfile:
    model = approval_manager.assign_batch(subject_id, profile_id, req.batch_id)
    return StudentProfile.model_validate(model)


# --- Faculty ---


@router.post("/faculty", response_model=User, summary="Create faculty")
def create_faculty(
    req: CreateFacultyRequest,
    user_manager: UserManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> User:
    model = user_manager.create_faculty(subject_id, req.model_dump(mode="json"))
    return User.model_validate(model)


@router.get("/faculty", response_model=List[User], summary="List faculty")
def list_faculty(
    user_manager: UserManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> List[User]:
    return [User.model_validate(model) for model in user_manager.list_faculty(subject_id)]


# --- Batches ---


@router.get("/batches", response_model=List[BatchInfo], summary="List batches")
def list_batches(
    batch_manager: BatchManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> List[BatchInfo]:
    """List batches with their computed status.

    Faculty only see the batches assigned to them.
    """
    today = batch_manager.today()
    return [
        _build_batch_info(model, today) for model in batch_manager.list_batches(subject_id)
    ]


@router.post("/batches", response_model=BatchInfo, summary="Create batch")
def create_batch(
    req: CreateBatchRequest,
    batch_manager: BatchManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> BatchInfo:
    model = batch_manager.create_batch(subject_id, req.model_dump(mode="json"))
    return _build_batch_info(model, batch_manager.today())


@router.patch("/batches/{batch_id}", response_model=BatchInfo, summary="Update batch")
def update_batch(
    batch_id: str,
    req: UpdateBatchRequest,
    batch_manager: BatchManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> BatchInfo:
    model = batch_manager.update_batch(
        subject_id, batch_id, req.model_dump(mode="json", exclude_unset=True)
    )
    return _build_batch_info(model, batch_manager.today())


@router.put(
    "/batches/{batch_id}/faculty", response_model=BatchInfo, summary="Assign batch faculty"
)
def assign_batch_faculty(
    batch_id: str,
    req: AssignFacultyRequest,
    batch_manager: BatchManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> BatchInfo:
    model = batch_manager.assign_faculty(subject_id, batch_id, req.faculty_id)
    return _build_batch_info(model, batch_manager.today())
