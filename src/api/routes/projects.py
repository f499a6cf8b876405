"""Project team routes."""

from typing import List

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_subject_id
from core.dependencies import ProjectManagerDep, UserManagerDep
from schemas.project import AddMemberRequest, CreateProjectRequest, ProjectInfo
from schemas.user import User

router = APIRouter(prefix="/api/projects", tags=["Project"])


@router.post("", response_model=ProjectInfo, summary="Create project")
def create_project(
    req: CreateProjectRequest,
    project_manager: ProjectManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> ProjectInfo:
    """Create a project led by the caller, who becomes its first member.

    Args:
        req: Project name and optional description.
        project_manager: Injected ProjectManager instance.
        subject_id: Authenticated student.

    Returns:
        ProjectInfo with the lead listed as the only member.
    """
    model = project_manager.create_project(subject_id, req.name, req.description)
    return project_manager.project_info(subject_id, model)


@router.get("", response_model=List[ProjectInfo], summary="List my projects")
def list_my_projects(
    project_manager: ProjectManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> List[ProjectInfo]:
    models = project_manager.list_projects_for_user(subject_id)
    return [project_manager.project_info(subject_id, model) for model in models]


@router.get("/available", response_model=List[ProjectInfo], summary="List joinable projects")
def list_available_projects(
    project_manager: ProjectManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> List[ProjectInfo]:
    models = project_manager.available_projects(subject_id)
    return [project_manager.project_info(subject_id, model) for model in models]


@router.get("/all", response_model=List[ProjectInfo], summary="List all projects")
def list_all_projects(
    project_manager: ProjectManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> List[ProjectInfo]:
    models = project_manager.list_all_projects(subject_id)
    return [project_manager.project_info(subject_id, model) for model in models]


@router.get("/students/search", response_model=User, summary="Find student by phone")
def search_student(
    phone: str,
    user_manager: UserManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> User:
    return User.model_validate(user_manager.find_by_phone(subject_id, phone))


@router.get("/{project_id}", response_model=ProjectInfo, summary="Get project")
def get_project(
    project_id: str,
    project_manager: ProjectManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> ProjectInfo:
    return project_manager.project_info(subject_id, project_manager.get_project(project_id))


@router.post("/{project_id}/join", response_model=ProjectInfo, summary="Join project")
def join_project(
    project_id: str,
    project_manager: ProjectManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> ProjectInfo:
    """Join a project led by a batch-mate.

    Fails when the project is full, the caller is already a member, or the
    lead is in another batch.
    """
    project_manager.join_project(project_id, subject_id)
    return project_manager.project_info(subject_id, project_manager.get_project(project_id))


@router.post("/{project_id}/members", response_model=ProjectInfo, summary="Add member")
def add_member(
    project_id: str,
    req: AddMemberRequest,
    project_manager: ProjectManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> ProjectInfo:
    project_manager.add_member(project_id, subject_id, req.user_id)
    return project_manager.project_info(subject_id, project_manager.get_project(project_id))
