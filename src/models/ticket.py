"""Ticket database models: leave requests and admin queries."""

from sqlalchemy import Boolean, CheckConstraint, Column, Date, String, Text
from .base import Base, deferred_fk


class LeaveRequestModel(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_leave_requests_status",
        ),
        CheckConstraint(
            "leave_type IN ('sick', 'casual')", name="ck_leave_requests_type"
        ),
    )

    id = Column(String, primary_key=True, index=True)
    user_id = Column(
        String, deferred_fk("users.user_id", ondelete="CASCADE"), index=True, nullable=False
    )
    leave_date = Column(Date, nullable=False)
    leave_type = Column(String, nullable=False)  # 'sick' or 'casual'
    reason = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="pending", index=True)
    reviewed_by = Column(String, nullable=True)
    reviewed_at = Column(String, nullable=True)
    created_at = Column(String, nullable=False)


class AdminQueryModel(Base):
    __tablename__ = "admin_queries"
    __table_args__ = (
        CheckConstraint(
            "category IN ('course', 'faculty', 'schedule', 'work', 'other')",
            name="ck_admin_queries_category",
        ),
    )

    id = Column(String, primary_key=True, index=True)
    user_id = Column(
        String, deferred_fk("users.user_id", ondelete="CASCADE"), index=True, nullable=False
    )
    title = Column(String, nullable=False)
    category = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    is_resolved = Column(Boolean, nullable=False, default=False, index=True)
    resolved_by = Column(String, nullable=True)
    resolved_at = Column(String, nullable=True)
    created_at = Column(String, nullable=False)
