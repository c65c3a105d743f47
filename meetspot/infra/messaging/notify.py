"""Notification delivery."""
import logging
from typing import Optional

from meetspot.domain.common.notifications import Notifier
from meetspot.domain.common.types import utcnow
from meetspot.infra.messaging.redis_bus import RedisBus, redis_bus
from meetspot.settings import settings

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):
    """Writes notifications to the log. Default when no broker is configured."""

    async def send(self, user_id: str, notification_type: str, payload: dict) -> None:
        logger.info("Notification to %s: %s %s", user_id, notification_type, payload)


class RedisNotifier(Notifier):
    """Publishes notifications as JSON to a Redis channel for the push workers."""

    def __init__(self, bus: Optional[RedisBus] = None, channel: Optional[str] = None):
        self.bus = bus or redis_bus
        self.channel = channel or settings.notification_channel

    async def send(self, user_id: str, notification_type: str, payload: dict) -> None:
        await self.bus.publish(
            self.channel,
            {
                "user_id": user_id,
                "type": notification_type,
                "payload": payload,
                "sent_at": utcnow().isoformat(),
            },
        )
        logger.debug("Published %s for %s to %s", notification_type, user_id, self.channel)


def get_notifier() -> Notifier:
    """Notifier for the configured backend."""
    if settings.notification_backend == "redis":
        return RedisNotifier()
    return LoggingNotifier()
