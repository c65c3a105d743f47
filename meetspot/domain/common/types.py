"""Common domain types."""
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel


def generate_id() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every table stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Caller(BaseModel):
    """Authenticated identity handed in by the identity collaborator.

    The moderator flag is trusted as-is; this service performs no
    authentication of its own.
    """

    user_id: str
    is_moderator: bool = False

    model_config = {"frozen": True}
