"""Project schema definitions."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from schemas.common import optional_text, required_text


class CreateProjectRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: required_text(3, 100)
    description: optional_text(10, 500) = None


class AddMemberRequest(BaseModel):
    user_id: str


class ProjectMemberInfo(BaseModel):
    user_id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    is_lead: bool = False
    joined_at: str


class ProjectInfo(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    lead_id: str
    created_at: str
    member_count: int
    members: List[ProjectMemberInfo] = []
