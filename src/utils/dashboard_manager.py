"""Per-role dashboard summaries."""

from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models.batch import BatchModel
from models.diary_entry import DiaryEntryModel
from models.project import ProjectMemberModel, ProjectModel
from models.student_profile import StudentProfileModel
from models.ticket import AdminQueryModel, LeaveRequestModel
from utils.authorization import AuthorizationResolver, Capability, Role, StudentStatus
from utils.batch_manager import BatchStatus, batch_status
from utils.diary_manager import DiaryManager
from utils.timeutils import Clock, utc_now, utc_today


class DashboardManager:
    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.auth = AuthorizationResolver(db)

    def summary(self, subject_id: str) -> Dict[str, Any]:
        """Counts shown on the landing page of the subject's role.

        Pending and rejected students only get their own status back.
        """
        caps = self.auth.require(subject_id, Capability.VIEW_OWN_DASHBOARD)
        result: Dict[str, Any] = {"role": caps.role.value}
        if caps.role is Role.ADMIN:
            result.update(self._admin_counts())
        elif caps.role is Role.FACULTY:
            result.update(self._faculty_counts(caps.batch_scope))
        else:
            result.update(self._student_counts(subject_id, caps.is_approved_student))
        return result

    def _student_counts(self, subject_id: str, approved: bool) -> Dict[str, Any]:
        profile = (
            self.db.query(StudentProfileModel)
            .filter(StudentProfileModel.user_id == subject_id)
            .first()
        )
        result: Dict[str, Any] = {
            "status": profile.status if profile else None,
            "student_code": profile.student_code if profile else None,
        }
        if not approved:
            return result
        diary = DiaryManager(self.db, clock=self.clock).aggregate(subject_id)
        result.update(
            {
                "diary_entries": diary.entry_count,
                "diary_hours": diary.total_hours,
                "pending_leaves": self._count(
                    LeaveRequestModel,
                    LeaveRequestModel.user_id == subject_id,
                    LeaveRequestModel.status == "pending",
                ),
                "open_queries": self._count(
                    AdminQueryModel,
                    AdminQueryModel.user_id == subject_id,
                    AdminQueryModel.is_resolved.is_(False),
                ),
                "projects": self._count(
                    ProjectMemberModel, ProjectMemberModel.user_id == subject_id
                ),
            }
        )
        return result

    def _admin_counts(self) -> Dict[str, Any]:
        today = utc_today(self.clock)
        by_status = {status.value: 0 for status in BatchStatus}
        for batch in self.db.query(BatchModel).all():
            by_status[batch_status(batch, today).value] += 1
        return {
            "pending_approvals": self._count(
                StudentProfileModel,
                StudentProfileModel.status == StudentStatus.PENDING.value,
            ),
            "approved_students": self._count(
                StudentProfileModel,
                StudentProfileModel.status == StudentStatus.APPROVED.value,
            ),
            "pending_leaves": self._count(
                LeaveRequestModel, LeaveRequestModel.status == "pending"
            ),
            "open_queries": self._count(
                AdminQueryModel, AdminQueryModel.is_resolved.is_(False)
            ),
            "batches": by_status,
        }

    def _faculty_counts(self, batch_scope) -> Dict[str, Any]:
        scope = list(batch_scope or ())
        in_scope = select(StudentProfileModel.user_id).where(
            StudentProfileModel.batch_id.in_(scope)
        )
        return {
            "batches": len(scope),
            "students": self._count(
                StudentProfileModel,
                StudentProfileModel.batch_id.in_(scope),
                StudentProfileModel.status == StudentStatus.APPROVED.value,
            ),
            "diary_entries": self._count(
                DiaryEntryModel, DiaryEntryModel.user_id.in_(in_scope)
            ),
            "projects": self._count(ProjectModel, ProjectModel.lead_id.in_(in_scope)),
            "leave_requests": self._count(
                LeaveRequestModel, LeaveRequestModel.user_id.in_(in_scope)
            ),
            "pending_leaves": self._count(
                LeaveRequestModel,
                LeaveRequestModel.user_id.in_(in_scope),
                LeaveRequestModel.status == "pending",
            ),
        }

    def _count(self, model, *criteria) -> int:
        return self.db.query(func.count()).select_from(model).filter(*criteria).scalar()
