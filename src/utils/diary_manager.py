"""Internship diary ledger.

Week assignment packs entries per owner: with ``W`` the highest week the
owner has used (1 when there are no entries), a new entry goes to ``W`` unless
``W`` already holds ``DIARY_ENTRIES_PER_WEEK`` entries, in which case it opens
``W + 1``. Insertion order decides, not the entry date.

An entry is editable by its owner while it is not explicitly locked and no
more than ``DIARY_EDIT_WINDOW_DAYS`` have elapsed since it was created. Both
conditions are evaluated when asked, never stored; an entry past the window
is reported as locked even if ``is_locked`` is still false.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, List, Mapping, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from config import DIARY_EDIT_WINDOW_DAYS, DIARY_ENTRIES_PER_WEEK
from core.exceptions import LockedError, NotFoundError, UnauthorizedError
from models.diary_entry import DiaryEntryModel
from models.student_profile import StudentProfileModel
from schemas.diary import (
    CreateDiaryEntryRequest,
    DiaryAggregate,
    DiaryEntry,
    UpdateDiaryEntryRequest,
    WeekSummary,
)
from utils.authorization import AuthorizationResolver, Capability
from utils.store import transaction
from utils.timeutils import Clock, parse_timestamp, utc_now
from utils.validation import validate_fields

logger = logging.getLogger(__name__)


class DiaryManager:
    """Manages internship diary entries."""

    def __init__(
        self,
        db: Session,
        clock: Clock = utc_now,
        entries_per_week: int = DIARY_ENTRIES_PER_WEEK,
        edit_window_days: int = DIARY_EDIT_WINDOW_DAYS,
    ):
        self.db = db
        self.clock = clock
        self.entries_per_week = entries_per_week
        self.edit_window = timedelta(days=edit_window_days)
        self.auth = AuthorizationResolver(db)

    # --- Rules ---

    def next_week_number(self, owner_id: str) -> int:
        """Week number the owner's next entry will be assigned."""
        max_week = (
            self.db.query(func.max(DiaryEntryModel.week_number))
            .filter(DiaryEntryModel.user_id == owner_id)
            .scalar()
        )
        if max_week is None:
            return 1
        in_week = (
            self.db.query(func.count(DiaryEntryModel.id))
            .filter(
                DiaryEntryModel.user_id == owner_id,
                DiaryEntryModel.week_number == max_week,
            )
            .scalar()
        )
        return max_week + 1 if in_week >= self.entries_per_week else max_week

    def is_editable(self, entry: DiaryEntryModel, now: Optional[datetime] = None) -> bool:
        if entry.is_locked:
            return False
        now = now or self.clock()
        return now - parse_timestamp(entry.created_at) <= self.edit_window

    def to_schema(self, entry: DiaryEntryModel, now: Optional[datetime] = None) -> DiaryEntry:
        editable = self.is_editable(entry, now)
        result = DiaryEntry.model_validate(entry)
        return result.model_copy(update={"editable": editable, "is_locked": not editable})

    # --- Operations ---

    def get_entry(self, entry_id: str) -> DiaryEntryModel:
        model = self.db.get(DiaryEntryModel, entry_id)
        if model is None:
            raise NotFoundError("DiaryEntry", entry_id)
        return model

    def create_entry(self, owner_id: str, fields: Mapping[str, Any]) -> DiaryEntryModel:
        """Create a diary entry for an approved student.

        Args:
            owner_id: Student writing the entry.
            fields: Raw entry fields (see CreateDiaryEntryRequest).

        Returns:
            The created DiaryEntryModel with its week number assigned.

        Raises:
            UnauthorizedError: If the owner is not an approved student.
            ValidationError: If hours are outside 0-24 or required text is
                missing.
        """
        self.auth.require(owner_id, Capability.WRITE_DIARY)
        data = validate_fields(CreateDiaryEntryRequest, fields)
        now = self.clock().isoformat()
        with transaction(self.db, "create diary entry"):
            entry = DiaryEntryModel(
                id=secrets.token_hex(8),
                user_id=owner_id,
                week_number=self.next_week_number(owner_id),
                is_locked=False,
                created_at=now,
                updated_at=now,
                **data.model_dump(),
            )
            self.db.add(entry)
        self.db.refresh(entry)
        logger.info(
            "Diary entry %s created for %s in week %s", entry.id, owner_id, entry.week_number
        )
        return entry

    def update_entry(
        self, requester_id: str, entry_id: str, fields: Mapping[str, Any]
    ) -> DiaryEntryModel:
        """Update an entry inside its edit window.

        Week number and owner never change.

        Raises:
            UnauthorizedError: If the requester is not an approved student or
                does not own the entry.
            NotFoundError: If the entry does not exist.
            LockedError: If the entry is locked or past its edit window.
            ValidationError: If the fields are malformed.
        """
        self.auth.require(requester_id, Capability.WRITE_DIARY)
        entry = self.get_entry(entry_id)
        if entry.user_id != requester_id:
            logger.warning(
                "Subject %s tried to edit diary entry %s of %s",
                requester_id,
                entry_id,
                entry.user_id,
            )
            raise UnauthorizedError("Only the owner can edit a diary entry")
        if not self.is_editable(entry):
            raise LockedError(f"Diary entry '{entry_id}' can no longer be edited")
        data = validate_fields(UpdateDiaryEntryRequest, fields)
        patch = data.model_dump(exclude_unset=True)
        if not patch:
            return entry

        patch["updated_at"] = self.clock().isoformat()
        with transaction(self.db, "update diary entry"):
            # Guard on is_locked so a concurrent admin lock wins
            result = self.db.execute(
                update(DiaryEntryModel)
                .where(
                    DiaryEntryModel.id == entry_id,
                    DiaryEntryModel.user_id == requester_id,
                    DiaryEntryModel.is_locked.is_(False),
                )
                .values(**patch)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise LockedError(f"Diary entry '{entry_id}' can no longer be edited")
        self.db.refresh(entry)
        return entry

    def lock_entry(self, requester_id: str, entry_id: str) -> DiaryEntryModel:
        """Explicitly lock an entry. Locking an already locked entry is a no-op."""
        self.auth.require(requester_id, Capability.LOCK_DIARY)
        entry = self.get_entry(entry_id)
        if not entry.is_locked:
            with transaction(self.db, "lock diary entry"):
                entry.is_locked = True
                entry.updated_at = self.clock().isoformat()
            self.db.refresh(entry)
            logger.info("Diary entry %s locked by %s", entry_id, requester_id)
        return entry

    def list_entries(
        self, requester_id: str, owner_id: Optional[str] = None
    ) -> List[DiaryEntryModel]:
        """List an owner's entries, ordered by week then entry date.

        Students read their own diary; admins read any; faculty read diaries
        of students in their assigned batches.
        """
        owner_id = self._require_read(requester_id, owner_id)
        return (
            self.db.query(DiaryEntryModel)
            .filter(DiaryEntryModel.user_id == owner_id)
            .order_by(
                DiaryEntryModel.week_number,
                DiaryEntryModel.entry_date,
                DiaryEntryModel.created_at,
            )
            .all()
        )

    def list_batch_entries(
        self, requester_id: str, batch_id: Optional[str] = None
    ) -> List[DiaryEntryModel]:
        """Recent entries across students, for admin and faculty review."""
        caps = self.auth.require(requester_id, Capability.VIEW_DIARIES)
        query = self.db.query(DiaryEntryModel).join(
            StudentProfileModel, StudentProfileModel.user_id == DiaryEntryModel.user_id
        )
        if batch_id is not None:
            if not caps.can_read_batch(batch_id):
                raise UnauthorizedError("Batch is outside your assignments")
            query = query.filter(StudentProfileModel.batch_id == batch_id)
        elif caps.batch_scope is not None:
            query = query.filter(StudentProfileModel.batch_id.in_(caps.batch_scope))
        return query.order_by(DiaryEntryModel.entry_date.desc()).all()

    def summarize(self, requester_id: str, owner_id: Optional[str] = None) -> DiaryAggregate:
        """Aggregate an owner's diary, with the same access rules as listing."""
        return self.aggregate(self._require_read(requester_id, owner_id))

    def aggregate(self, owner_id: str) -> DiaryAggregate:
        """Total hours and entry count for an owner, with a per-week breakdown.

        Pure read; callers are responsible for access checks.
        """
        rows = (
            self.db.query(
                DiaryEntryModel.week_number,
                func.count(DiaryEntryModel.id),
                func.coalesce(func.sum(DiaryEntryModel.hours_worked), 0.0),
            )
            .filter(DiaryEntryModel.user_id == owner_id)
            .group_by(DiaryEntryModel.week_number)
            .order_by(DiaryEntryModel.week_number)
            .all()
        )
        weeks = [
            WeekSummary(week_number=week, entry_count=count, total_hours=float(hours))
            for week, count, hours in rows
        ]
        return DiaryAggregate(
            user_id=owner_id,
            entry_count=sum(w.entry_count for w in weeks),
            total_hours=sum(w.total_hours for w in weeks),
            weeks=weeks,
        )

    def _require_read(self, requester_id: str, owner_id: Optional[str]) -> str:
        owner_id = owner_id or requester_id
        caps = self.auth.for_subject(requester_id)
        if owner_id == requester_id and caps.has(Capability.VIEW_OWN_DIARY):
            return owner_id
        caps.require(Capability.VIEW_DIARIES)
        if not caps.can_read_batch(self._batch_of(owner_id)):
            raise UnauthorizedError("Diary belongs to a student outside your batches")
        return owner_id

    def _batch_of(self, owner_id: str) -> Optional[str]:
        profile = (
            self.db.query(StudentProfileModel)
            .filter(StudentProfileModel.user_id == owner_id)
            .first()
        )
        return profile.batch_id if profile else None
