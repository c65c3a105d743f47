"""Report and business profile database models."""
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum as SQLEnum, Integer, String, Text

from meetspot.domain.common.types import utcnow
from meetspot.domain.moderation.models import (
    BusinessProfile as BusinessProfileEntity,
    BusinessStatus,
    Report as ReportEntity,
    ReportStatus,
)
from meetspot.infra.db.base import Base
from meetspot.infra.db.types import enum_values


class ReportModel(Base):
    """Report database model."""

    __tablename__ = "reports"

    id = Column(String, primary_key=True)
    reporter_id = Column(String, nullable=False, index=True)
    reported_activity_id = Column(String, nullable=True, index=True)
    reported_user_id = Column(String, nullable=True, index=True)
    reason = Column(String, nullable=False)
    comment = Column(Text, nullable=True)
    status = Column(
        SQLEnum(ReportStatus, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        default=ReportStatus.OPEN,
    )
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_entity(self) -> ReportEntity:
        """Convert to domain entity."""
        return ReportEntity(
            id=self.id,
            reporter_id=self.reporter_id,
            reported_activity_id=self.reported_activity_id,
            reported_user_id=self.reported_user_id,
            reason=self.reason,
            comment=self.comment,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, entity: ReportEntity) -> "ReportModel":
        """Create from domain entity."""
        return cls(**entity.model_dump())


class BusinessProfileModel(Base):
    """Business profile database model."""

    __tablename__ = "business_profiles"
    __table_args__ = (
        CheckConstraint("promotion_credits >= 0", name="ck_business_profiles_credits_non_negative"),
    )

    id = Column(String, primary_key=True)
    owner_user_id = Column(String, nullable=False, unique=True)
    business_name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    website = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    status = Column(
        SQLEnum(BusinessStatus, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        default=BusinessStatus.PENDING,
    )
    can_create_activities = Column(Boolean, nullable=False, default=True)
    can_promote_activities = Column(Boolean, nullable=False, default=False)
    promotion_credits = Column(Integer, nullable=False, default=0)
    verified_at = Column(DateTime, nullable=True)
    verified_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_entity(self) -> BusinessProfileEntity:
        """Convert to domain entity."""
        return BusinessProfileEntity(
            id=self.id,
            owner_user_id=self.owner_user_id,
            business_name=self.business_name,
            description=self.description,
            website=self.website,
            phone=self.phone,
            status=self.status,
            can_create_activities=self.can_create_activities,
            can_promote_activities=self.can_promote_activities,
            promotion_credits=self.promotion_credits,
            verified_at=self.verified_at,
            verified_by=self.verified_by,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, entity: BusinessProfileEntity) -> "BusinessProfileModel":
        """Create from domain entity."""
        return cls(**entity.model_dump())
