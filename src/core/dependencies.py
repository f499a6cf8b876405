"""Dependency injection module for FastAPI.

Every manager is built per request around a request-scoped DB session, so the
capability checks inside it always read the current role and approval status.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils import approval_manager
from utils import batch_manager
from utils import dashboard_manager
from utils import diary_manager
from utils import project_manager
from utils import resource_manager
from utils import review_manager
from utils import user_manager


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_approval_manager(db: Session = Depends(get_db)) -> approval_manager.ApprovalManager:
    return approval_manager.ApprovalManager(db)


def get_batch_manager(db: Session = Depends(get_db)) -> batch_manager.BatchManager:
    return batch_manager.BatchManager(db)


def get_diary_manager(db: Session = Depends(get_db)) -> diary_manager.DiaryManager:
    """Get DiaryManager instance with request-scoped DB session."""
    return diary_manager.DiaryManager(db)


def get_project_manager(db: Session = Depends(get_db)) -> project_manager.ProjectManager:
    """Get ProjectManager instance with request-scoped DB session."""
    return project_manager.ProjectManager(db)


def get_leave_manager(db: Session = Depends(get_db)) -> review_manager.LeaveManager:
    return review_manager.LeaveManager(db)


def get_query_manager(db: Session = Depends(get_db)) -> review_manager.QueryManager:
    return review_manager.QueryManager(db)


def get_resource_manager(db: Session = Depends(get_db)) -> resource_manager.ResourceManager:
    return resource_manager.ResourceManager(db)


def get_dashboard_manager(
    db: Session = Depends(get_db),
) -> dashboard_manager.DashboardManager:
    return dashboard_manager.DashboardManager(db)


# Type aliases for dependency injection
UserManagerDep = Annotated[user_manager.UserManager, Depends(get_user_manager)]
ApprovalManagerDep = Annotated[
    approval_manager.ApprovalManager, Depends(get_approval_manager)
]
BatchManagerDep = Annotated[batch_manager.BatchManager, Depends(get_batch_manager)]
DiaryManagerDep = Annotated[diary_manager.DiaryManager, Depends(get_diary_manager)]
ProjectManagerDep = Annotated[
    project_manager.ProjectManager, Depends(get_project_manager)
]
LeaveManagerDep = Annotated[review_manager.LeaveManager, Depends(get_leave_manager)]
QueryManagerDep = Annotated[review_manager.QueryManager, Depends(get_query_manager)]
ResourceManagerDep = Annotated[
    resource_manager.ResourceManager, Depends(get_resource_manager)
]
DashboardManagerDep = Annotated[
    dashboard_manager.DashboardManager, Depends(get_dashboard_manager)
]
