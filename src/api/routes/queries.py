"""Admin query routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_subject_id
from core.dependencies import QueryManagerDep
from schemas.ticket import AdminQuery, CreateAdminQueryRequest

router = APIRouter(prefix="/api/queries", tags=["Query"])


@router.post("", response_model=AdminQuery, summary="Raise a query")
def create_query(
    req: CreateAdminQueryRequest,
    query_manager: QueryManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> AdminQuery:
    model = query_manager.create_query(subject_id, req.model_dump(mode="json"))
    return AdminQuery.model_validate(model)


@router.get("", response_model=List[AdminQuery], summary="List my queries")
def list_my_queries(
    query_manager: QueryManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> List[AdminQuery]:
    return [
        AdminQuery.model_validate(model)
        for model in query_manager.list_own_queries(subject_id)
    ]


@router.get("/all", response_model=List[AdminQuery], summary="List all queries")
def list_queries(
    query_manager: QueryManagerDep,
    resolved: Optional[bool] = None,
    subject_id: str = Depends(get_current_subject_id),
) -> List[AdminQuery]:
    return [
        AdminQuery.model_validate(model)
        for model in query_manager.list_queries(subject_id, resolved)
    ]


@router.post("/{query_id}/resolve", response_model=AdminQuery, summary="Resolve query")
def resolve_query(
    query_id: str,
    query_manager: QueryManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> AdminQuery:
    model = query_manager.resolve(query_id, subject_id)
    return AdminQuery.model_validate(model)
