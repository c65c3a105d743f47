"""Activity database model."""
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text

from meetspot.domain.activity.models import Activity as ActivityEntity
from meetspot.domain.common.types import utcnow
from meetspot.infra.db.base import Base
from meetspot.infra.db.types import JSONBType


class ActivityModel(Base):
    """Activity database model."""

    __tablename__ = "activities"

    id = Column(String, primary_key=True)
    host_user_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    visibility = Column(String(20), nullable=False, default="public")
    password = Column(String, nullable=True)
    joined_user_ids = Column(JSONBType, nullable=False, default=list)
    capacity = Column(Integer, nullable=True)
    is_closed = Column(Boolean, nullable=False, default=False)
    starts_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    # Bumped on every write; compare-and-swap guard for the joined set
    version = Column(Integer, nullable=False, default=1)

    def to_entity(self) -> ActivityEntity:
        """Convert to domain entity."""
        return ActivityEntity(
            id=self.id,
            host_user_id=self.host_user_id,
            title=self.title,
            description=self.description,
            latitude=self.latitude,
            longitude=self.longitude,
            visibility=self.visibility,
            password=self.password,
            joined_user_ids=list(self.joined_user_ids or []),
            capacity=self.capacity,
            is_closed=self.is_closed,
            starts_at=self.starts_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
            version=self.version,
        )

    @classmethod
    def from_entity(cls, entity: ActivityEntity) -> "ActivityModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            host_user_id=entity.host_user_id,
            title=entity.title,
            description=entity.description,
            latitude=entity.latitude,
            longitude=entity.longitude,
            visibility=entity.visibility,
            password=entity.password,
            joined_user_ids=list(entity.joined_user_ids),
            capacity=entity.capacity,
            is_closed=entity.is_closed,
            starts_at=entity.starts_at,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            version=entity.version,
        )
