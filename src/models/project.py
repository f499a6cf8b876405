from sqlalchemy import Column, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base, deferred_fk


class ProjectModel(Base):
    __tablename__ = "projects"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    lead_id = Column(String, deferred_fk("users.user_id"), index=True, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    members = relationship(
        "ProjectMemberModel",
        back_populates="project",
        cascade="all, delete-orphan",
    )


class ProjectMemberModel(Base):
    __tablename__ = "project_members"
    __table_args__ = (
        UniqueConstraint(
            "project_id",
            "user_id",
            name="uq_project_members_project_user",
        ),
    )

    id = Column(String, primary_key=True, index=True)
    project_id = Column(
        String, deferred_fk("projects.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id = Column(
        String, deferred_fk("users.user_id", ondelete="CASCADE"), index=True, nullable=False
    )
    joined_at = Column(String, nullable=False)

    project = relationship("ProjectModel", back_populates="members")
