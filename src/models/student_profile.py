from sqlalchemy import CheckConstraint, Column, Integer, String
from .base import Base, deferred_fk

STUDENT_CODE_SEQUENCE = "student_code"


class StudentProfileModel(Base):
    __tablename__ = "student_profiles"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_student_profiles_status",
        ),
    )

    id = Column(String, primary_key=True, index=True)
    user_id = Column(
        String,
        deferred_fk("users.user_id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    student_code = Column(String, unique=True, nullable=True)
    usn = Column(String, nullable=True)
    college_name = Column(String, nullable=True)
    branch = Column(String, nullable=True)
    internship_role = Column(String, nullable=True)
    skill_level = Column(String, nullable=True, default="beginner")
    status = Column(String, nullable=False, default="pending", index=True)
    batch_id = Column(String, deferred_fk("batches.id"), index=True, nullable=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)


class SequenceModel(Base):
    """Named counters, bumped with a single UPDATE.

    Rows are created once by ``init_db``; registration never inserts one.
    """

    __tablename__ = "sequences"

    name = Column(String, primary_key=True)
    value = Column(Integer, nullable=False, default=0)
