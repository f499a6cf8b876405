"""Internship diary routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_subject_id
from core.dependencies import DiaryManagerDep
from schemas.diary import (
    CreateDiaryEntryRequest,
    DiaryAggregate,
    DiaryEntry,
    UpdateDiaryEntryRequest,
)

router = APIRouter(prefix="/api/diary", tags=["Diary"])


@router.post("", response_model=DiaryEntry, summary="Create diary entry")
def create_entry(
    req: CreateDiaryEntryRequest,
    diary_manager: DiaryManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> DiaryEntry:
    """Write a diary entry; its week number is assigned by the ledger.

    Args:
        req: Entry fields.
        diary_manager: Injected DiaryManager instance.
        subject_id: Authenticated student.

    Returns:
        The created DiaryEntry.
    """
    model = diary_manager.create_entry(subject_id, req.model_dump(mode="json"))
    return diary_manager.to_schema(model)


@router.get("", response_model=List[DiaryEntry], summary="List diary entries")
def list_entries(
    diary_manager: DiaryManagerDep,
    owner_id: Optional[str] = None,
    subject_id: str = Depends(get_current_subject_id),
) -> List[DiaryEntry]:
    """List a diary, the caller's own unless ``owner_id`` is given.

    Each entry reports whether it can still be edited.
    """
    models = diary_manager.list_entries(subject_id, owner_id)
    now = diary_manager.clock()
    return [diary_manager.to_schema(model, now) for model in models]


@router.get("/summary", response_model=DiaryAggregate, summary="Diary totals")
def summarize(
    diary_manager: DiaryManagerDep,
    owner_id: Optional[str] = None,
    subject_id: str = Depends(get_current_subject_id),
) -> DiaryAggregate:
    return diary_manager.summarize(subject_id, owner_id)


@router.get("/review", response_model=List[DiaryEntry], summary="Review batch diaries")
def list_batch_entries(
    diary_manager: DiaryManagerDep,
    batch_id: Optional[str] = None,
    subject_id: str = Depends(get_current_subject_id),
) -> List[DiaryEntry]:
    models = diary_manager.list_batch_entries(subject_id, batch_id)
    now = diary_manager.clock()
    return [diary_manager.to_schema(model, now) for model in models]


@router.patch("/{entry_id}", response_model=DiaryEntry, summary="Update diary entry")
def update_entry(
    entry_id: str,
    req: UpdateDiaryEntryRequest,
    diary_manager: DiaryManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> DiaryEntry:
    model = diary_manager.update_entry(
        subject_id, entry_id, req.model_dump(mode="json", exclude_unset=True)
    )
    return diary_manager.to_schema(model)


@router.post("/{entry_id}/lock", response_model=DiaryEntry, summary="Lock diary entry")
def lock_entry(
    entry_id: str,
    diary_manager: DiaryManagerDep,
    subject_id: str = Depends(get_current_subject_id),
) -> DiaryEntry:
    model = diary_manager.lock_entry(subject_id, entry_id)
    return diary_manager.to_schema(model)
