from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from .base import Base, deferred_fk


class ResourceModel(Base):
    __tablename__ = "resources"
    __table_args__ = (
        CheckConstraint(
            "resource_type IN ('video', 'text', 'notes')",
            name="ck_resources_type",
        ),
    )

    id = Column(String, primary_key=True, index=True)
    batch_id = Column(
        String, deferred_fk("batches.id", ondelete="CASCADE"), index=True, nullable=False
    )
    module_number = Column(Integer, nullable=False, default=1)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    resource_type = Column(String, nullable=False)  # 'video', 'text', or 'notes'
    content_url = Column(String, nullable=True)
    content_text = Column(Text, nullable=True)
    file_path = Column(String, nullable=True)  # opaque storage path
    created_by = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)


class AssignmentModel(Base):
    __tablename__ = "assignments"
    __table_args__ = (
        CheckConstraint("deadline >= start_date", name="ck_assignments_deadline"),
    )

    id = Column(String, primary_key=True, index=True)
    batch_id = Column(
        String, deferred_fk("batches.id", ondelete="CASCADE"), index=True, nullable=False
    )
    created_by = Column(String, nullable=False)
    assignment_number = Column(Integer, nullable=False, default=1)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    file_path = Column(String, nullable=True)
    links = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    deadline = Column(Date, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)


class AssignmentSubmissionModel(Base):
    __tablename__ = "assignment_submissions"
    __table_args__ = (
        UniqueConstraint(
            "assignment_id",
            "student_id",
            name="uq_assignment_submissions_assignment_student",
        ),
    )

    id = Column(String, primary_key=True, index=True)
    assignment_id = Column(
        String, deferred_fk("assignments.id", ondelete="CASCADE"), index=True, nullable=False
    )
    student_id = Column(String, deferred_fk("users.user_id"), index=True, nullable=False)
    file_path = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    submitted_at = Column(String, nullable=False)
