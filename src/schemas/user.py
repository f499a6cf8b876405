"""User, registration and approval schema definitions."""

from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, HttpUrl

from schemas.common import PhoneNumber, _blank_to_none, optional_text, required_text

InternshipRole = Literal["ai-ml", "java", "vlsi", "mern"]
SkillLevel = Literal["beginner", "intermediate", "advanced"]


class RegisterRequest(BaseModel):
    """Contact details every subject supplies at registration."""

    model_config = ConfigDict(extra="forbid")

    full_name: required_text(2, 100)
    email: EmailStr
    phone: PhoneNumber = None


class StudentRegisterRequest(RegisterRequest):
    usn: optional_text(3, 20) = None
    college_name: optional_text(3, 100) = None
    branch: optional_text() = None
    internship_role: Optional[InternshipRole] = None
    skill_level: SkillLevel = "beginner"
    batch_id: optional_text() = None


class AdminRegisterRequest(RegisterRequest):
    admin_token: str = Field(description="Bootstrap secret configured as ADMIN_TOKEN.")


class CreateFacultyRequest(RegisterRequest):
    user_id: required_text() = Field(description="Subject id issued by the identity provider.")


class UpdateProfileRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    full_name: Optional[required_text(2, 100)] = None
    phone: PhoneNumber = None
    bio: optional_text(max_length=500) = None
    linkedin_url: Annotated[Optional[HttpUrl], BeforeValidator(_blank_to_none)] = None
    avatar_path: optional_text() = None
    resume_path: optional_text() = None


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    bio: Optional[str] = None
    linkedin_url: Optional[str] = None
    avatar_path: Optional[str] = None
    resume_path: Optional[str] = None
    created_at: str


class StudentProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    student_code: Optional[str] = None
    usn: Optional[str] = None
    college_name: Optional[str] = None
    branch: Optional[str] = None
    internship_role: Optional[str] = None
    skill_level: Optional[str] = None
    status: str
    batch_id: Optional[str] = None
    created_at: str


class CurrentUserResponse(BaseModel):
    user: User
    role: Optional[str] = None
    student_profile: Optional[StudentProfile] = None
    capabilities: List[str] = Field(default_factory=list)


class ReviewStudentRequest(BaseModel):
    decision: Literal["approved", "rejected"]


class AssignBatchRequest(BaseModel):
    batch_id: Optional[str] = None
