"""Activity domain models."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from meetspot.domain.common.types import generate_id, utcnow


class Visibility(str, Enum):
    """Admission mode of an activity."""
    PUBLIC = "public"
    FRIENDS = "friends"
    PRIVATE = "private"


class Activity(BaseModel):
    """Location-bound activity.

    `visibility` is kept as the raw stored string so that a value outside
    the known modes is still loadable and gets denied by the access engine.
    `version` guards the joined set against concurrent writers.
    """

    id: str
    host_user_id: str
    title: str
    description: Optional[str] = None
    latitude: float
    longitude: float
    visibility: str = Visibility.PUBLIC.value
    password: Optional[str] = None
    joined_user_ids: list[str] = Field(default_factory=list)
    capacity: Optional[int] = None
    is_closed: bool = False
    starts_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    version: int = 1

    @classmethod
    def create(
        cls,
        host_user_id: str,
        title: str,
        latitude: float,
        longitude: float,
        visibility: Visibility = Visibility.PUBLIC,
        password: Optional[str] = None,
        capacity: Optional[int] = None,
        description: Optional[str] = None,
        starts_at: Optional[datetime] = None,
    ) -> "Activity":
        now = utcnow()
        return cls(
            id=generate_id(),
            host_user_id=host_user_id,
            title=title,
            description=description,
            latitude=latitude,
            longitude=longitude,
            visibility=Visibility(visibility).value,
            password=password or None,
            capacity=capacity,
            starts_at=starts_at,
            created_at=now,
            updated_at=now,
        )

    @property
    def has_password(self) -> bool:
        return bool(self.password)

    @property
    def is_full(self) -> bool:
        return self.capacity is not None and len(self.joined_user_ids) >= self.capacity

    def has_member(self, user_id: str) -> bool:
        return user_id in self.joined_user_ids
