"""Ticket schema definitions: leave requests and admin queries."""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from schemas.common import required_text

LeaveType = Literal["sick", "casual"]
QueryCategory = Literal["course", "faculty", "schedule", "work", "other"]


class CreateLeaveRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    leave_date: date
    leave_type: LeaveType
    reason: required_text(10, 500)


class ReviewLeaveRequest(BaseModel):
    decision: Literal["approved", "rejected"]


class LeaveRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    leave_date: date
    leave_type: str
    reason: str
    status: str
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[str] = None
    created_at: str


class CreateAdminQueryRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: required_text(3, 100)
    category: QueryCategory
    description: required_text(20, 1000)


class AdminQuery(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    category: str
    description: str
    is_resolved: bool
    resolved_by: Optional[str] = None
    resolved_at: Optional[str] = None
    created_at: str
