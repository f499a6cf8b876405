from .base import Base
from .user import UserModel, UserRoleModel
from .batch import BatchModel
from .student_profile import SequenceModel, StudentProfileModel
from .diary_entry import DiaryEntryModel
from .project import ProjectMemberModel, ProjectModel
from .ticket import AdminQueryModel, LeaveRequestModel
from .resource import AssignmentModel, AssignmentSubmissionModel, ResourceModel

__all__ = [
    "Base",
    "UserModel",
    "UserRoleModel",
    "BatchModel",
    "SequenceModel",
    "StudentProfileModel",
    "DiaryEntryModel",
    "ProjectModel",
    "ProjectMemberModel",
    "LeaveRequestModel",
    "AdminQueryModel",
    "ResourceModel",
    "AssignmentModel",
    "AssignmentSubmissionModel",
]
