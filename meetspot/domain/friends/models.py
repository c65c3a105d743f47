"""Friendship domain models."""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from meetspot.domain.common.types import generate_id, utcnow


class FriendStatus(str, Enum):
    """Friendship edge status."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    BLOCKED = "blocked"


def canonical_pair(a: str, b: str) -> tuple[str, str]:
    """Order a user pair so (a, b) and (b, a) share one key."""
    return (a, b) if a <= b else (b, a)


class Friendship(BaseModel):
    """Friendship edge keyed by its canonical (low, high) pair.

    `requester_id` records the direction: who sent the request, or who
    placed the block.
    """

    id: str
    user_low_id: str
    user_high_id: str
    requester_id: str
    status: FriendStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls, requester_id: str, target_id: str, status: FriendStatus = FriendStatus.PENDING
    ) -> "Friendship":
        """Create a new edge from requester to target."""
        low, high = canonical_pair(requester_id, target_id)
        now = utcnow()
        return cls(
            id=generate_id(),
            user_low_id=low,
            user_high_id=high,
            requester_id=requester_id,
            status=status,
            created_at=now,
            updated_at=now,
        )

    @property
    def target_id(self) -> str:
        """The user who received the request."""
        return self.user_high_id if self.requester_id == self.user_low_id else self.user_low_id

    def other(self, user_id: str) -> str:
        """The party that is not `user_id`."""
        return self.user_high_id if user_id == self.user_low_id else self.user_low_id

    def involves(self, user_id: str) -> bool:
        return user_id in (self.user_low_id, self.user_high_id)
