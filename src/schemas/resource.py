"""Learning resource and assignment schema definitions."""

from datetime import date
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, HttpUrl, model_validator

from schemas.common import _blank_to_none, optional_text, required_text

ResourceType = Literal["video", "text", "notes"]
OptionalUrl = Annotated[Optional[HttpUrl], BeforeValidator(_blank_to_none)]


class CreateResourceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    batch_id: required_text()
    module_number: int = Field(ge=1, le=50)
    title: required_text(3, 100)
    description: optional_text() = None
    resource_type: ResourceType
    content_url: OptionalUrl = None
    content_text: optional_text() = None
    file_path: optional_text() = None


class UpdateResourceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    module_number: Optional[int] = Field(default=None, ge=1, le=50)
    title: Optional[required_text(3, 100)] = None
    description: optional_text() = None
    resource_type: Optional[ResourceType] = None
    content_url: OptionalUrl = None
    content_text: optional_text() = None
    file_path: optional_text() = None


class Resource(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    batch_id: str
    module_number: int
    title: str
    description: Optional[str] = None
    resource_type: str
    content_url: Optional[str] = None
    content_text: Optional[str] = None
    file_path: Optional[str] = None
    created_by: str
    created_at: str


class CreateAssignmentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    batch_id: required_text()
    assignment_number: int = Field(default=1, ge=1)
    title: required_text(3, 100)
    description: optional_text() = None
    file_path: optional_text() = None
    links: optional_text() = None
    start_date: Optional[date] = None
    deadline: date

    @model_validator(mode="after")
    def check_deadline(self):
        if self.start_date is not None and self.deadline < self.start_date:
            raise ValueError("deadline must not be before start_date")
        return self


class Assignment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    batch_id: str
    created_by: str
    assignment_number: int
    title: str
    description: Optional[str] = None
    file_path: Optional[str] = None
    links: Optional[str] = None
    start_date: date
    deadline: date
    created_at: str


class SubmitAssignmentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_path: required_text()
    file_name: required_text(1, 255)


class AssignmentSubmission(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    assignment_id: str
    student_id: str
    file_path: str
    file_name: str
    submitted_at: str
