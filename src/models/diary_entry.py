from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    Float,
    Integer,
    String,
    Text,
)
from .base import Base, deferred_fk


class DiaryEntryModel(Base):
    __tablename__ = "internship_diary"
    __table_args__ = (
        CheckConstraint(
            "hours_worked >= 0 AND hours_worked <= 24",
            name="ck_internship_diary_hours",
        ),
        CheckConstraint("week_number >= 1", name="ck_internship_diary_week"),
    )

    id = Column(String, primary_key=True, index=True)
    user_id = Column(
        String, deferred_fk("users.user_id", ondelete="CASCADE"), index=True, nullable=False
    )
    week_number = Column(Integer, nullable=False, default=1)
    entry_date = Column(Date, nullable=False)
    title = Column(String, nullable=True)
    work_description = Column(Text, nullable=False)
    work_summary = Column(Text, nullable=True)
    hours_worked = Column(Float, nullable=False)
    reference_links = Column(Text, nullable=True)
    learning_outcome = Column(Text, nullable=True)
    skills_gained = Column(Text, nullable=True)
    is_locked = Column(Boolean, nullable=False, default=False)
    created_at = Column(String, nullable=False)  # ISO format string
    updated_at = Column(String, nullable=False)
