"""Learning resource and assignment routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_subject_id
from core.dependencies import ResourceManagerDep
from schemas.resource import (
    Assignment,
    AssignmentSubmission,
    CreateAssignmentRequest,
    CreateResourceRequest,
    Resource,
    SubmitAssignmentRequest,
    UpdateResourceRequest,
)

router = APIRouter(prefix="/api", tags=["Resource"])


# --- Resources ---


@router.post("/resources", response_model=Resource, summary="Add resource")
def create_resource(
    req: CreateResourceRequest,
    resource_manager: ResourceManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> Resource:
    model = resource_manager.create_resource(subject_id, req.model_dump(mode="json"))
    return Resource.model_validate(model)


@router.get("/resources", response_model=List[Resource], summary="List resources")
def list_resources(
    resource_manager: ResourceManagerDep,
    batch_id: Optional[str] = None,
    subject_id: str = Depends(get_current_subject_id),
) -> List[Resource]:
    """List learning resources.

    Students only see their own batch; faculty their assigned batches.
    """
    return [
        Resource.model_validate(model)
        for model in resource_manager.list_resources(subject_id, batch_id)
    ]


@router.patch("/resources/{resource_id}", response_model=Resource, summary="Update resource")
def update_resource(
    resource_id: str,
    req: UpdateResourceRequest,
    resource_manager: ResourceManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> Resource:
    model = resource_manager.update_resource(
        subject_id, resource_id, req.model_dump(mode="json", exclude_unset=True)
    )
    return Resource.model_validate(model)


@router.delete("/resources/{resource_id}", summary="Delete resource")
def delete_resource(
    resource_id: str,
    resource_manager: ResourceManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> dict:
    resource_manager.delete_resource(subject_id, resource_id)
    return {"success": True, "message": "Resource deleted successfully"}


# --- Assignments ---


@router.post("/assignments", response_model=Assignment, summary="Create assignment")
def create_assignment(
    req: CreateAssignmentRequest,
    resource_manager: ResourceManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> Assignment:
    model = resource_manager.create_assignment(subject_id, req.model_dump(mode="json"))
    return Assignment.model_validate(model)


@router.get("/assignments", response_model=List[Assignment], summary="List assignments")
def list_assignments(
    resource_manager: ResourceManagerDep,
    batch_id: Optional[str] = None,
    subject_id: str = Depends(get_current_subject_id),
) -> List[Assignment]:
    return [
        Assignment.model_validate(model)
        for model in resource_manager.list_assignments(subject_id, batch_id)
    ]


@router.post(
    "/assignments/{assignment_id}/submissions",
    response_model=AssignmentSubmission,
    summary="Submit assignment",
)
def submit_assignment(
    assignment_id: str,
    req: SubmitAssignmentRequest,
    resource_manager: ResourceManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> AssignmentSubmission:
    """Submit an assignment before its deadline.

    Args:
        assignment_id: Assignment being submitted.
        req: Storage path and file name of the uploaded work.
        resource_manager: Injected ResourceManager instance.
        subject_id: Authenticated student.

    Returns:
        The recorded AssignmentSubmission.
    """
    model = resource_manager.submit_assignment(
        subject_id, assignment_id, req.model_dump(mode="json")
    )
    return AssignmentSubmission.model_validate(model)


@router.get(
    "/assignments/{assignment_id}/submissions",
    response_model=List[AssignmentSubmission],
    summary="List submissions",
)
def list_submissions(
    assignment_id: str,
    resource_manager: ResourceManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> List[AssignmentSubmission]:
    return [
        AssignmentSubmission.model_validate(model)
        for model in resource_manager.list_submissions(subject_id, assignment_id)
    ]
