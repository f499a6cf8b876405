"""Authentication routes.

This module verifies bearer tokens issued by the identity provider and
handles subject registration. Credentials never reach this service; the
token's ``sub`` claim is the subject id used everywhere else.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from config import JWT_ALGORITHM, JWT_SECRET_KEY
from core.dependencies import UserManagerDep
from schemas.user import (
    AdminRegisterRequest,
    CurrentUserResponse,
    StudentProfile,
    StudentRegisterRequest,
    UpdateProfileRequest,
    User,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# HTTP Bearer token security
security = HTTPBearer()


def verify_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    """Verify JWT token from Authorization header.

    Args:
        credentials: HTTP Bearer token credentials.

    Returns:
        Decoded token payload.

    Raises:
        HTTPException: If token is invalid or expired.
    """
    token = credentials.credentials
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    return payload


def get_current_subject_id(token_payload: dict = Depends(verify_token)) -> str:
    """Get the authenticated subject id.

    Whether the subject may do anything is decided by the managers, which
    resolve its capabilities from the store on every call.
    """
    return token_payload["sub"]


@router.post("/register/student", summary="Register as a student")
def register_student(
    req: StudentRegisterRequest,
    subject_id: str = Depends(get_current_subject_id),
    user_manager: UserManagerDep = None,
) -> dict:
    """Register the authenticated subject as a student awaiting approval.

    Args:
        req: Registration details.
        subject_id: Authenticated subject id.
        user_manager: Injected UserManager instance.

    Returns:
        Dictionary with user_id, student_code and the pending status.
    """
    user, profile = user_manager.register_student(
        subject_id, req.model_dump(mode="json", exclude_unset=True)
    )
    return {
        "success": True,
        "message": "Registration received; awaiting approval",
        "user_id": user.user_id,
        "student_code": profile.student_code,
        "status": profile.status,
    }


@router.post("/register/admin", summary="Register as an administrator")
def register_admin(
    req: AdminRegisterRequest,
    subject_id: str = Depends(get_current_subject_id),
    user_manager: UserManagerDep = None,
) -> dict:
    user = user_manager.register_admin(subject_id, req.model_dump(mode="json"))
    return {
        "success": True,
        "message": "Admin registered successfully",
        "user_id": user.user_id,
    }


@router.get("/me", response_model=CurrentUserResponse, summary="Get current subject")
def get_current_user_info(
    subject_id: str = Depends(get_current_subject_id),
    user_manager: UserManagerDep = None,
) -> CurrentUserResponse:
    """Get the authenticated subject with role, profile and capabilities.

    Raises:
        NotFoundError: If the subject has not registered yet.
    """
    user = user_manager.get_user(subject_id)
    profile = user_manager.get_student_profile(subject_id)
    caps = user_manager.auth.for_subject(subject_id)
    return CurrentUserResponse(
        user=User.model_validate(user),
        role=caps.role.value if caps.role else None,
        student_profile=StudentProfile.model_validate(profile) if profile else None,
        capabilities=sorted(cap.value for cap in caps.capabilities),
    )


@router.patch("/me", response_model=User, summary="Update own profile")
def update_current_user(
    req: UpdateProfileRequest,
    subject_id: str = Depends(get_current_subject_id),
    user_manager: UserManagerDep = None,
) -> User:
    model = user_manager.update_profile(
        subject_id, req.model_dump(mode="json", exclude_unset=True)
    )
    return User.model_validate(model)
