"""Dashboard routes."""

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_subject_id
from core.dependencies import DashboardManagerDep

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("", summary="Dashboard summary")
def get_dashboard(
    dashboard_manager: DashboardManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> dict:
    return dashboard_manager.summary(subject_id)
