"""Project team management utilities.

Projects are formed by their lead, who is also the first member. A project
never holds more than ``PROJECT_MAX_MEMBERS`` members and a subject is a member
of a given project at most once. Both rules are enforced by the store: the
member insert is a single ``INSERT ... SELECT ... WHERE count < limit`` and
``(project_id, user_id)`` carries a unique constraint. The reads that precede
the insert only decide which error to report.
"""

import logging
import secrets
from typing import Any, Dict, List, Optional

from sqlalchemy import func, insert, literal, select
from sqlalchemy.orm import Session

from config import PROJECT_MAX_MEMBERS
from core.exceptions import (
    CapacityError,
    DuplicateError,
    IneligibleError,
    NotFoundError,
    UnauthorizedError,
)
from models.project import ProjectMemberModel, ProjectModel
from models.student_profile import StudentProfileModel
from models.user import UserModel
from schemas.project import CreateProjectRequest, ProjectInfo, ProjectMemberInfo
from utils.authorization import (
    AuthorizationResolver,
    Capability,
    CapabilitySet,
    StudentStatus,
)
from utils.store import transaction
from utils.timeutils import Clock, utc_now
from utils.validation import validate_fields

logger = logging.getLogger(__name__)


class ProjectManager:
    """Manages project formation and membership."""

    def __init__(
        self,
        db: Session,
        clock: Clock = utc_now,
        max_members: int = PROJECT_MAX_MEMBERS,
    ):
        self.db = db
        self.clock = clock
        self.max_members = max_members
        self.auth = AuthorizationResolver(db)

    def create_project(
        self, lead_id: str, name: str, description: Optional[str] = None
    ) -> ProjectModel:
        """Create a project and add its lead as the first member.

        Both rows are written in one transaction; if the membership insert
        fails the project row is rolled back with it.

        Args:
            lead_id: Approved student creating and leading the project.
            name: Project name, at least 3 characters.
            description: Optional description, 10-500 characters.

        Returns:
            The created ProjectModel.

        Raises:
            UnauthorizedError: If the lead is not an approved student.
            ValidationError: If name or description is invalid.
        """
        self.auth.require(lead_id, Capability.CREATE_PROJECT)
        data = validate_fields(
            CreateProjectRequest, {"name": name, "description": description}
        )
        now = self.clock().isoformat()
        project = ProjectModel(
            id=secrets.token_hex(8),
            name=data.name,
            description=data.description,
            lead_id=lead_id,
            created_at=now,
            updated_at=now,
        )
        with transaction(self.db, "create project"):
            self.db.add(project)
            self.db.flush()
            self.db.add(
                ProjectMemberModel(
                    id=secrets.token_hex(8),
                    project_id=project.id,
                    user_id=lead_id,
                    joined_at=now,
                )
            )
        self.db.refresh(project)
        logger.info("Project %s (%s) formed by lead %s", project.id, project.name, lead_id)
        return project

    def get_project(self, project_id: str) -> ProjectModel:
        model = self.db.get(ProjectModel, project_id)
        if model is None:
            raise NotFoundError("Project", project_id)
        return model

    def member_count(self, project_id: str) -> int:
        return (
            self.db.query(func.count(ProjectMemberModel.id))
            .filter(ProjectMemberModel.project_id == project_id)
            .scalar()
        )

    def is_member(self, project_id: str, subject_id: str) -> bool:
        return (
            self.db.query(ProjectMemberModel.id)
            .filter(
                ProjectMemberModel.project_id == project_id,
                ProjectMemberModel.user_id == subject_id,
            )
            .first()
            is not None
        )

    def join_project(self, project_id: str, subject_id: str) -> ProjectMemberModel:
        """Join a project led by a batch-mate.

        Raises:
            UnauthorizedError: If the subject is not an approved student.
            NotFoundError: If the project does not exist.
            CapacityError: If the project is full.
            DuplicateError: If the subject is already a member.
            IneligibleError: If the subject and the lead are in different
                batches.
        """
        caps = self.auth.require(subject_id, Capability.JOIN_PROJECT)
        project = self.get_project(project_id)
        self._check_seat(project_id, subject_id)
        subject_batch = self._batch_of(subject_id)
        if subject_batch is None or subject_batch != self._batch_of(project.lead_id):
            logger.warning(
                "Subject %s refused join of project %s: batch mismatch", subject_id, project_id
            )
            raise IneligibleError("You can only join projects led by students in your batch")
        member = self._insert_member(project_id, subject_id)
        logger.info("Subject %s joined project %s", caps.subject_id, project_id)
        return member

    def add_member(
        self, project_id: str, requester_id: str, target_subject_id: str
    ) -> ProjectMemberModel:
        """Lead adds a student found through the phone search.

        No batch check here: the lead may add across batches.

        Raises:
            UnauthorizedError: If the requester is not the project lead.
            IneligibleError: If the target is not an approved student.
            CapacityError: If the project is full.
            DuplicateError: If the target is already a member.
        """
        self.auth.require(requester_id, Capability.MANAGE_OWN_PROJECT)
        project = self.get_project(project_id)
        if project.lead_id != requester_id:
            raise UnauthorizedError("Only the project lead can add members")
        target = (
            self.db.query(StudentProfileModel)
            .filter(StudentProfileModel.user_id == target_subject_id)
            .first()
        )
        if target is None or target.status != StudentStatus.APPROVED.value:
            raise IneligibleError(f"Subject '{target_subject_id}' is not an approved student")
        self._check_seat(project_id, target_subject_id)
        member = self._insert_member(project_id, target_subject_id)
        logger.info(
            "Lead %s added %s to project %s", requester_id, target_subject_id, project_id
        )
        return member

    def available_projects(self, subject_id: str) -> List[ProjectModel]:
        """Projects the subject could join right now.

        Excludes projects the subject leads or belongs to, projects that are
        full, and projects whose lead is in another batch.
        """
        caps = self.auth.require(subject_id, Capability.JOIN_PROJECT)
        subject_batch = self._batch_of(subject_id)
        if subject_batch is None:
            return []
        joined = select(ProjectMemberModel.project_id).where(
            ProjectMemberModel.user_id == subject_id
        )
        counts = (
            select(
                ProjectMemberModel.project_id.label("project_id"),
                func.count(ProjectMemberModel.id).label("member_count"),
            )
            .group_by(ProjectMemberModel.project_id)
            .subquery()
        )
        return (
            self.db.query(ProjectModel)
            .join(StudentProfileModel, StudentProfileModel.user_id == ProjectModel.lead_id)
            .outerjoin(counts, counts.c.project_id == ProjectModel.id)
            .filter(
                StudentProfileModel.batch_id == subject_batch,
                ProjectModel.lead_id != caps.subject_id,
                ProjectModel.id.not_in(joined),
                func.coalesce(counts.c.member_count, 0) < self.max_members,
            )
            .order_by(ProjectModel.created_at.desc())
            .all()
        )

    def list_projects_for_user(self, subject_id: str) -> List[ProjectModel]:
        """Projects the subject leads or has joined."""
        self.auth.require(subject_id, Capability.VIEW_OWN_PROJECTS)
        joined = select(ProjectMemberModel.project_id).where(
            ProjectMemberModel.user_id == subject_id
        )
        return (
            self.db.query(ProjectModel)
            .filter((ProjectModel.lead_id == subject_id) | ProjectModel.id.in_(joined))
            .order_by(ProjectModel.created_at.desc())
            .all()
        )

    def list_all_projects(self, requester_id: str) -> List[ProjectModel]:
        """Every project for admins; projects led from assigned batches for faculty."""
        caps = self.auth.require(requester_id, Capability.VIEW_PROJECTS)
        query = self.db.query(ProjectModel)
        if caps.batch_scope is not None:
            query = query.join(
                StudentProfileModel, StudentProfileModel.user_id == ProjectModel.lead_id
            ).filter(StudentProfileModel.batch_id.in_(caps.batch_scope))
        return query.order_by(ProjectModel.created_at.desc()).all()

    def list_members(self, requester_id: str, project_id: str) -> List[Dict[str, Any]]:
        project = self.get_project(project_id)
        self._require_read(self.auth.for_subject(requester_id), project)
        query = (
            self.db.query(ProjectMemberModel, UserModel)
            .join(UserModel, UserModel.user_id == ProjectMemberModel.user_id)
            .filter(ProjectMemberModel.project_id == project_id)
            .order_by(ProjectMemberModel.joined_at)
        )
        results = []
        for membership, user in query.all():
            results.append(
                {
                    "user_id": user.user_id,
                    "full_name": user.full_name,
                    "email": user.email,
                    "phone": user.phone,
                    "is_lead": user.user_id == project.lead_id,
                    "joined_at": membership.joined_at,
                }
            )
        return results

    def project_info(self, requester_id: str, project: ProjectModel) -> ProjectInfo:
        members = self.list_members(requester_id, project.id)
        return ProjectInfo(
            id=project.id,
            name=project.name,
            description=project.description,
            lead_id=project.lead_id,
            created_at=project.created_at,
            member_count=len(members),
            members=[ProjectMemberInfo(**m) for m in members],
        )

    def _require_read(self, caps: CapabilitySet, project: ProjectModel) -> None:
        if caps.subject_id and self.is_member(project.id, caps.subject_id):
            return
        can_browse = caps.has(Capability.VIEW_PROJECTS) or caps.has(Capability.JOIN_PROJECT)
        if can_browse and caps.can_read_batch(self._batch_of(project.lead_id)):
            return
        raise UnauthorizedError("You cannot view this project")

    def _check_seat(self, project_id: str, subject_id: str) -> None:
        if self.member_count(project_id) >= self.max_members:
            raise CapacityError(project_id, self.max_members)
        if self.is_member(project_id, subject_id):
            raise DuplicateError(f"Subject '{subject_id}' is already a member of this project")

    def _lock_project(self, project_id: str) -> None:
        """Hold the project row until commit so seat claims run one at a time.

        Under READ COMMITTED two claims would otherwise both count the same
        free seat. SQLite renders no FOR UPDATE; its writer lock already
        serialises the claims.
        """
        self.db.execute(
            select(ProjectModel.id).where(ProjectModel.id == project_id).with_for_update()
        )

    def _insert_member(self, project_id: str, subject_id: str) -> ProjectMemberModel:
        member_id = secrets.token_hex(8)
        current = (
            select(func.count(ProjectMemberModel.id))
            .where(ProjectMemberModel.project_id == project_id)
            .scalar_subquery()
        )
        stmt = insert(ProjectMemberModel).from_select(
            ["id", "project_id", "user_id", "joined_at"],
            select(
                literal(member_id),
                literal(project_id),
                literal(subject_id),
                literal(self.clock().isoformat()),
            ).where(current < self.max_members),
        )

        def duplicate(exc):
            return DuplicateError(f"Subject '{subject_id}' is already a member of this project")

        with transaction(self.db, "add project member", on_integrity_error=duplicate):
            self._lock_project(project_id)
            result = self.db.execute(stmt)
            if result.rowcount == 0:
                raise CapacityError(project_id, self.max_members)
        return self.db.get(ProjectMemberModel, member_id)

    def _batch_of(self, subject_id: str) -> Optional[str]:
        profile = (
            self.db.query(StudentProfileModel)
            .filter(StudentProfileModel.user_id == subject_id)
            .first()
        )
        return profile.batch_id if profile else None
