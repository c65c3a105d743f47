"""Friendship database model."""
from sqlalchemy import Column, DateTime, Enum as SQLEnum, String, UniqueConstraint

from meetspot.domain.common.types import utcnow
from meetspot.domain.friends.models import FriendStatus, Friendship as FriendshipEntity
from meetspot.infra.db.base import Base
from meetspot.infra.db.types import enum_values


class FriendshipModel(Base):
    """One row per unordered user pair."""

    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_friendships_pair"),
    )

    id = Column(String, primary_key=True)
    user_low_id = Column(String, nullable=False, index=True)
    user_high_id = Column(String, nullable=False, index=True)
    requester_id = Column(String, nullable=False)
    status = Column(
        SQLEnum(FriendStatus, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        default=FriendStatus.PENDING,
    )
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_entity(self) -> FriendshipEntity:
        """Convert to domain entity."""
        return FriendshipEntity(
            id=self.id,
            user_low_id=self.user_low_id,
            user_high_id=self.user_high_id,
            requester_id=self.requester_id,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, entity: FriendshipEntity) -> "FriendshipModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            user_low_id=entity.user_low_id,
            user_high_id=entity.user_high_id,
            requester_id=entity.requester_id,
            status=entity.status,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
