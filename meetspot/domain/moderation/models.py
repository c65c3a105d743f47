"""Moderation domain models."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from meetspot.domain.common.types import generate_id, utcnow


class ReportStatus(str, Enum):
    """Report status. Moderators may move a report between any two values."""
    OPEN = "open"
    REVIEWED = "reviewed"
    DISMISSED = "dismissed"


class BusinessStatus(str, Enum):
    """Business profile status."""
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class Report(BaseModel):
    """User report about an activity or another user."""

    id: str
    reporter_id: str
    reported_activity_id: Optional[str] = None
    reported_user_id: Optional[str] = None
    reason: str
    comment: Optional[str] = None
    status: ReportStatus = ReportStatus.OPEN
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls,
        reporter_id: str,
        reason: str,
        reported_activity_id: Optional[str] = None,
        reported_user_id: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> "Report":
        now = utcnow()
        return cls(
            id=generate_id(),
            reporter_id=reporter_id,
            reported_activity_id=reported_activity_id,
            reported_user_id=reported_user_id,
            reason=reason,
            comment=comment,
            created_at=now,
            updated_at=now,
        )


class CapabilityOverrides(BaseModel):
    """Partial update of a business profile's capabilities.

    Unset fields are left alone.
    """

    can_create_activities: Optional[bool] = None
    can_promote_activities: Optional[bool] = None
    promotion_credits: Optional[int] = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class BusinessProfile(BaseModel):
    """Business account.

    Status and capability flags are independent: verifying a business does
    not grant it anything.
    """

    id: str
    owner_user_id: str
    business_name: str
    description: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    status: BusinessStatus = BusinessStatus.PENDING
    can_create_activities: bool = True
    can_promote_activities: bool = False
    promotion_credits: int = 0
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls,
        owner_user_id: str,
        business_name: str,
        description: Optional[str] = None,
        website: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> "BusinessProfile":
        now = utcnow()
        return cls(
            id=generate_id(),
            owner_user_id=owner_user_id,
            business_name=business_name,
            description=description,
            website=website,
            phone=phone,
            created_at=now,
            updated_at=now,
        )
