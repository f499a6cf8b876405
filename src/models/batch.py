from sqlalchemy import CheckConstraint, Column, Date, String, Text
from .base import Base, deferred_fk


class BatchModel(Base):
    __tablename__ = "batches"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_batches_date_range"),
    )

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    course_code = Column(String, nullable=False, default="01")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    assigned_faculty_id = Column(
        String, deferred_fk("users.user_id"), index=True, nullable=True
    )
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
