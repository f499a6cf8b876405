"""Internship diary schema definitions."""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from schemas.common import optional_text, required_text


class CreateDiaryEntryRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entry_date: date
    title: optional_text(max_length=200) = None
    work_description: required_text(10, 2000)
    work_summary: optional_text() = None
    hours_worked: float = Field(ge=0, le=24, description="Hours worked on the day, 0 to 24.")
    reference_links: optional_text() = None
    learning_outcome: optional_text() = None
    skills_gained: optional_text() = None


class UpdateDiaryEntryRequest(BaseModel):
    """Partial update. Owner and week number are not updatable fields."""

    model_config = ConfigDict(extra="forbid")

    entry_date: Optional[date] = None
    title: optional_text(max_length=200) = None
    work_description: Optional[required_text(10, 2000)] = None
    work_summary: optional_text() = None
    hours_worked: Optional[float] = Field(default=None, ge=0, le=24)
    reference_links: optional_text() = None
    learning_outcome: optional_text() = None
    skills_gained: optional_text() = None

    @model_validator(mode="after")
    def check_required_not_cleared(self):
        for name in ("entry_date", "work_description", "hours_worked"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self


class DiaryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    week_number: int
    entry_date: date
    title: Optional[str] = None
    work_description: str
    work_summary: Optional[str] = None
    hours_worked: float
    reference_links: Optional[str] = None
    learning_outcome: Optional[str] = None
    skills_gained: Optional[str] = None
    is_locked: bool
    editable: bool = False
    created_at: str
    updated_at: str


class WeekSummary(BaseModel):
    week_number: int
    entry_count: int
    total_hours: float


class DiaryAggregate(BaseModel):
    user_id: str
    entry_count: int
    total_hours: float
    weeks: List[WeekSummary] = Field(default_factory=list)
