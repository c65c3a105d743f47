"""Activity log database model."""
from sqlalchemy import Column, DateTime, String

from meetspot.domain.audit.models import ActivityLogEntry, ActivityLogType
from meetspot.domain.common.types import utcnow
from meetspot.infra.db.base import Base
from meetspot.infra.db.types import JSONBType


class ActivityLogModel(Base):
    """Append-only audit trail."""

    __tablename__ = "activity_logs"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=True, index=True)
    log_type = Column(String(40), nullable=False, index=True)
    # No foreign key: entries outlive deleted activities
    activity_id = Column(String, nullable=True)
    log_metadata = Column("metadata", JSONBType, nullable=True)  # "metadata" is reserved on declarative models
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    def to_entity(self) -> ActivityLogEntry:
        """Convert to domain entity."""
        return ActivityLogEntry(
            id=self.id,
            user_id=self.user_id,
            log_type=ActivityLogType(self.log_type),
            activity_id=self.activity_id,
            metadata=self.log_metadata,
            created_at=self.created_at,
        )

    @classmethod
    def from_entity(cls, entity: ActivityLogEntry) -> "ActivityLogModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            user_id=entity.user_id,
            log_type=entity.log_type.value,
            activity_id=entity.activity_id,
            log_metadata=entity.metadata,
            created_at=entity.created_at,
        )
