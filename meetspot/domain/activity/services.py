"""Activity lifecycle services."""
import logging
from datetime import datetime
from typing import Optional, Protocol, Union

from meetspot.domain.access.policies import AccessControlEngine, AccessDecision, AccessReason
from meetspot.domain.activity.models import Activity, Visibility
from meetspot.domain.audit.models import ActivityLogType
from meetspot.domain.audit.services import ActivityLogRepository, record_event
from meetspot.domain.common.errors import (
    AccessDeniedError,
    CapacityExceededError,
    ConflictError,
    InvalidStateError,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from meetspot.domain.common.types import Caller

logger = logging.getLogger(__name__)


class ActivityRepository(Protocol):
    """Activity repository protocol."""

    async def create(self, activity: Activity) -> Activity:
        """Insert an activity."""
        ...

    async def get(self, activity_id: str) -> Optional[Activity]:
        """Get activity by ID."""
        ...

    async def update_members(
        self, activity_id: str, expected_version: int, joined_user_ids: list[str]
    ) -> Optional[Activity]:
        """Replace the joined set if the stored version still equals `expected_version`.

        Returns None when the row is gone or another writer bumped the version.
        """
        ...

    async def mark_closed(self, activity_id: str) -> Optional[Activity]:
        """Set the closed flag and bump the version."""
        ...

    async def delete(self, activity_id: str) -> bool:
        """Delete an activity. Returns False if it did not exist."""
        ...


class ActivityService:
    """Activity creation, admission and membership."""

    def __init__(
        self,
        activity_repo: ActivityRepository,
        access_engine: AccessControlEngine,
        activity_log: Optional[ActivityLogRepository] = None,
        join_max_attempts: int = 5,
    ):
        self.activity_repo = activity_repo
        self.access_engine = access_engine
        self.activity_log = activity_log
        self.join_max_attempts = join_max_attempts

    async def create_activity(
        self,
        host_user_id: str,
        title: str,
        latitude: float,
        longitude: float,
        visibility: Union[Visibility, str] = Visibility.PUBLIC,
        password: Optional[str] = None,
        capacity: Optional[int] = None,
        description: Optional[str] = None,
        starts_at: Optional[datetime] = None,
    ) -> Activity:
        """Create an activity hosted by `host_user_id`."""
        if not title or not title.strip():
            raise ValidationError("Title is required")
        try:
            visibility = Visibility(visibility)
        except ValueError:
            raise ValidationError(f"Unknown visibility: {visibility!r}")
        if capacity is not None and capacity < 1:
            raise ValidationError("Capacity must be at least 1")
        if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
            raise ValidationError("Coordinates out of range")

        activity = await self.activity_repo.create(
            Activity.create(
                host_user_id=host_user_id,
                title=title.strip(),
                latitude=latitude,
                longitude=longitude,
                visibility=visibility,
                password=password,
                capacity=capacity,
                description=description,
                starts_at=starts_at,
            )
        )
        logger.info(
            "Activity %s created by %s (visibility=%s, capacity=%s)",
            activity.id, host_user_id, activity.visibility, activity.capacity,
        )
        await record_event(
            self.activity_log, ActivityLogType.ACTIVITY_CREATED, user_id=host_user_id,
            activity_id=activity.id,
        )
        return activity

    async def get_activity(self, activity_id: str) -> Activity:
        activity = await self.activity_repo.get(activity_id)
        if not activity:
            raise NotFoundError("Activity", activity_id)
        return activity

    async def check_access(
        self, activity_id: str, user_id: str, password: Optional[str] = None
    ) -> AccessDecision:
        """Admission decision without joining."""
        activity = await self.get_activity(activity_id)
        return await self.access_engine.can_join(activity, user_id, password)

    async def join(self, activity_id: str, user_id: str, password: Optional[str] = None) -> Activity:
        """Add a user to the joined set.

        Admission and capacity are re-evaluated on every attempt against a
        fresh read, and the write only lands if nobody changed the activity
        in between.
        """
        for attempt in range(1, self.join_max_attempts + 1):
            activity = await self.get_activity(activity_id)
            if activity.is_closed:
                raise InvalidStateError(f"Activity {activity_id} is closed")

            decision = await self.access_engine.can_join(activity, user_id, password)
            if not decision.allowed:
                reason = decision.reason or AccessReason.GENERIC
                logger.info("User %s denied access to activity %s: %s", user_id, activity_id, reason.value)
                raise AccessDeniedError(reason.value)

            if activity.has_member(user_id):
                return activity
            if activity.is_full:
                raise CapacityExceededError(activity.id, activity.capacity)

            updated = await self.activity_repo.update_members(
                activity.id, activity.version, activity.joined_user_ids + [user_id]
            )
            if updated is not None:
                logger.info(
                    "User %s joined activity %s (%s/%s)",
                    user_id, activity_id, len(updated.joined_user_ids), updated.capacity or "-",
                )
                await record_event(
                    self.activity_log, ActivityLogType.ACTIVITY_JOINED, user_id=user_id,
                    activity_id=activity_id,
                )
                return updated
            logger.info("Join of %s to activity %s raced (attempt %s)", user_id, activity_id, attempt)

        raise ConflictError(f"Activity {activity_id} is under heavy contention; retry")

    async def leave(self, activity_id: str, user_id: str) -> Activity:
        """Remove a user from the joined set. The host leaving does not close the activity."""
        for attempt in range(1, self.join_max_attempts + 1):
            activity = await self.get_activity(activity_id)
            if not activity.has_member(user_id):
                return activity

            remaining = [uid for uid in activity.joined_user_ids if uid != user_id]
            updated = await self.activity_repo.update_members(activity.id, activity.version, remaining)
            if updated is not None:
                logger.info("User %s left activity %s", user_id, activity_id)
                await record_event(
                    self.activity_log, ActivityLogType.ACTIVITY_LEFT, user_id=user_id,
                    activity_id=activity_id,
                )
                return updated
            logger.info("Leave of %s from activity %s raced (attempt %s)", user_id, activity_id, attempt)

        raise ConflictError(f"Activity {activity_id} is under heavy contention; retry")

    async def close(self, activity_id: str, caller: Caller) -> Activity:
        """Stop accepting joins. Members are kept."""
        activity = await self.get_activity(activity_id)
        self._require_host_or_moderator(activity, caller, "close")
        if activity.is_closed:
            return activity

        closed = await self.activity_repo.mark_closed(activity_id)
        if closed is None:
            raise NotFoundError("Activity", activity_id)
        logger.info("Activity %s closed by %s", activity_id, caller.user_id)
        await record_event(
            self.activity_log, ActivityLogType.ACTIVITY_CLOSED, user_id=caller.user_id,
            activity_id=activity_id,
        )
        return closed

    async def delete(self, activity_id: str, caller: Caller) -> None:
        activity = await self.get_activity(activity_id)
        self._require_host_or_moderator(activity, caller, "delete")

        if not await self.activity_repo.delete(activity_id):
            raise NotFoundError("Activity", activity_id)
        logger.info(
            "Activity %s deleted by %s%s",
            activity_id, caller.user_id, " (moderator)" if caller.is_moderator else "",
        )
        await record_event(
            self.activity_log, ActivityLogType.ACTIVITY_DELETED, user_id=caller.user_id,
            activity_id=activity_id,
        )

    def _require_host_or_moderator(self, activity: Activity, caller: Caller, action: str) -> None:
        if caller.user_id != activity.host_user_id and not caller.is_moderator:
            raise NotAuthorizedError(f"Only the host or a moderator can {action} this activity")
