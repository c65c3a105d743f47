"""Activity admission policy."""
import logging
from enum import Enum
from typing import Optional, Protocol

from pydantic import BaseModel

from meetspot.domain.activity.models import Activity, Visibility

logger = logging.getLogger(__name__)


class AccessReason(str, Enum):
    """Machine-readable denial codes surfaced to clients."""
    REQUIRES_PASSWORD = "requiresPassword"
    REQUIRES_FRIENDSHIP = "requiresFriendship"
    GENERIC = "generic"


class AccessDecision(BaseModel):
    """Result of an admission check."""

    allowed: bool
    reason: Optional[AccessReason] = None
    # Activity has an access code the client may prompt for
    requires_password: bool = False

    @classmethod
    def allow(cls, requires_password: bool = False) -> "AccessDecision":
        return cls(allowed=True, requires_password=requires_password)

    @classmethod
    def deny(cls, reason: AccessReason, requires_password: bool = False) -> "AccessDecision":
        return cls(allowed=False, reason=reason, requires_password=requires_password)


class FriendshipChecker(Protocol):
    """Friendship checker protocol."""

    async def are_friends(self, user_a: str, user_b: str) -> bool:
        """Check if two users have an accepted friendship."""
        ...


def _check_password(activity: Activity, supplied: Optional[str]) -> AccessDecision:
    """Exact string match against the activity's access code, if it has one."""
    if not activity.password:
        return AccessDecision.allow()
    if supplied is not None and supplied == activity.password:
        return AccessDecision.allow(requires_password=True)
    return AccessDecision.deny(AccessReason.REQUIRES_PASSWORD, requires_password=True)


class AccessControlEngine:
    """Decides whether a user may join an activity.

    Rules, in order: the host always gets in; public activities check the
    access code if one is set; friends-only activities require an accepted
    friendship with the host and then the access code; private activities
    require the access code and are closed to everyone but the host when
    none is configured. Unknown visibility values are denied.

    The check has no side effects.
    """

    def __init__(self, friendship_checker: FriendshipChecker):
        self.friendship_checker = friendship_checker

    async def can_join(
        self, activity: Activity, user_id: str, password: Optional[str] = None
    ) -> AccessDecision:
        if user_id == activity.host_user_id:
            return AccessDecision.allow(requires_password=bool(activity.password))

        if activity.visibility == Visibility.PUBLIC.value:
            return _check_password(activity, password)

        if activity.visibility == Visibility.FRIENDS.value:
            if not await self.friendship_checker.are_friends(user_id, activity.host_user_id):
                return AccessDecision.deny(
                    AccessReason.REQUIRES_FRIENDSHIP, requires_password=bool(activity.password)
                )
            return _check_password(activity, password)

        if activity.visibility == Visibility.PRIVATE.value:
            if not activity.password:
                return AccessDecision.deny(AccessReason.REQUIRES_PASSWORD)
            return _check_password(activity, password)

        logger.warning(
            "Activity %s has unknown visibility %r; denying access", activity.id, activity.visibility
        )
        return AccessDecision.deny(AccessReason.GENERIC)
