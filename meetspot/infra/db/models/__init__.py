"""Database models."""
from meetspot.infra.db.models.activity import ActivityModel
from meetspot.infra.db.models.activity_log import ActivityLogModel
from meetspot.infra.db.models.friendship import FriendshipModel
from meetspot.infra.db.models.moderation import BusinessProfileModel, ReportModel
from meetspot.infra.db.models.verification import VerificationRecordModel

__all__ = [
    "ActivityModel",
    "ActivityLogModel",
    "FriendshipModel",
    "BusinessProfileModel",
    "ReportModel",
    "VerificationRecordModel",
]
