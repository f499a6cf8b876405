"""User database models.

This module defines the subject profile and role models using SQLAlchemy.
Credentials live with the external identity provider; ``user_id`` is the
subject id it issues.
"""

from sqlalchemy import CheckConstraint, Column, String, Text
from .base import Base, deferred_fk


class UserModel(Base):
    """User profile database model."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, index=True, nullable=True)
    bio = Column(Text, nullable=True)
    linkedin_url = Column(String, nullable=True)
    avatar_path = Column(String, nullable=True)
    resume_path = Column(String, nullable=True)
    created_at = Column(String, nullable=False)  # ISO format string
    updated_at = Column(String, nullable=False)


class UserRoleModel(Base):
    """Role assignment; the primary key makes it once-per-subject."""

    __tablename__ = "user_roles"
    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'faculty', 'student')", name="ck_user_roles_role"
        ),
    )

    user_id = Column(
        String, deferred_fk("users.user_id", ondelete="CASCADE"), primary_key=True
    )
    role = Column(String, nullable=False)  # 'admin', 'faculty', or 'student'
    assigned_at = Column(String, nullable=False)
