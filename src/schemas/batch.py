"""Batch schema definitions."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from schemas.common import optional_text, required_text


class CreateBatchRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: required_text(1, 100)
    description: optional_text(max_length=500) = None
    course_code: str = Field(default="01", pattern=r"^[0-9]{2}$")
    start_date: date
    end_date: date
    assigned_faculty_id: optional_text() = None

    @model_validator(mode="after")
    def check_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class UpdateBatchRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[required_text(1, 100)] = None
    description: optional_text(max_length=500) = None
    course_code: Optional[str] = Field(default=None, pattern=r"^[0-9]{2}$")
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class AssignFacultyRequest(BaseModel):
    faculty_id: Optional[str] = None


class BatchInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    course_code: str
    start_date: date
    end_date: date
    assigned_faculty_id: Optional[str] = None
    status: Optional[str] = None
