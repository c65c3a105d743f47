"""Activity log domain models."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from meetspot.domain.common.types import generate_id, utcnow


class ActivityLogType(str, Enum):
    """Audited event types."""
    ACTIVITY_CREATED = "ACTIVITY_CREATED"
    ACTIVITY_JOINED = "ACTIVITY_JOINED"
    ACTIVITY_LEFT = "ACTIVITY_LEFT"
    ACTIVITY_CLOSED = "ACTIVITY_CLOSED"
    ACTIVITY_DELETED = "ACTIVITY_DELETED"
    VERIFICATION_SUBMITTED = "VERIFICATION_SUBMITTED"
    REPORT_CREATED = "REPORT_CREATED"
    BUSINESS_PROFILE_CREATED = "BUSINESS_PROFILE_CREATED"
    CREDITS_PURCHASED = "CREDITS_PURCHASED"


class ActivityLogEntry(BaseModel):
    """One audit trail entry."""

    id: str
    user_id: Optional[str] = None
    log_type: ActivityLogType
    activity_id: Optional[str] = None
    metadata: Optional[dict] = None
    created_at: datetime

    @classmethod
    def create(
        cls,
        log_type: ActivityLogType,
        user_id: Optional[str] = None,
        activity_id: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> "ActivityLogEntry":
        """Create a new log entry."""
        return cls(
            id=generate_id(),
            user_id=user_id,
            log_type=log_type,
            activity_id=activity_id,
            metadata=metadata,
            created_at=utcnow(),
        )
