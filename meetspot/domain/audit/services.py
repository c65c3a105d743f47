"""Activity log services."""
import logging
from typing import Optional, Protocol

from meetspot.domain.audit.models import ActivityLogEntry, ActivityLogType
from meetspot.domain.common.errors import NotAuthorizedError
from meetspot.domain.common.types import Caller

logger = logging.getLogger(__name__)


class ActivityLogRepository(Protocol):
    """Activity log repository protocol."""

    async def create(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        """Append an entry."""
        ...

    async def list_recent(
        self, limit: int = 100, log_type: Optional[ActivityLogType] = None
    ) -> list[ActivityLogEntry]:
        """List newest entries first."""
        ...


async def record_event(
    log_repo: Optional[ActivityLogRepository],
    log_type: ActivityLogType,
    user_id: Optional[str] = None,
    activity_id: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> None:
    """Append to the audit trail. A failed write is logged and dropped."""
    if log_repo is None:
        return
    try:
        await log_repo.create(
            ActivityLogEntry.create(
                log_type=log_type,
                user_id=user_id,
                activity_id=activity_id,
                metadata=metadata,
            )
        )
    except Exception as e:
        logger.warning("Could not write activity log %s for user %s: %s", log_type.value, user_id, e)


class ActivityLogService:
    """Read access to the audit trail for moderators."""

    def __init__(self, log_repo: ActivityLogRepository):
        self.log_repo = log_repo

    async def list_logs(
        self,
        caller: Caller,
        limit: int = 100,
        log_type: Optional[ActivityLogType] = None,
    ) -> list[ActivityLogEntry]:
        """List recent log entries."""
        if not caller.is_moderator:
            raise NotAuthorizedError("Only moderators can read the activity log")
        return await self.log_repo.list_recent(limit=limit, log_type=log_type)
