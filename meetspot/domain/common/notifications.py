"""Notification collaborator protocol and best-effort delivery helper."""
import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Notification sink (push, pub/sub, log)."""

    async def send(self, user_id: str, notification_type: str, payload: dict) -> None:
        """Send a notification."""
        ...


async def notify_safely(
    notifier: Optional[Notifier], user_id: str, notification_type: str, payload: dict
) -> None:
    """Deliver a notification; failures are logged, never raised to the caller."""
    if notifier is None:
        return
    try:
        await notifier.send(user_id, notification_type, payload)
    except Exception as e:
        logger.warning("Notification %s for user %s failed: %s", notification_type, user_id, e)
