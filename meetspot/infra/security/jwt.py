"""JWT session tokens."""
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt

from meetspot.domain.common.types import Caller, utcnow
from meetspot.settings import settings


def create_access_token(
    user_id: str, is_moderator: bool = False, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed token carrying the user id and moderator flag."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    now = utcnow()
    to_encode = {
        "sub": user_id,
        "mod": is_moderator,
        "type": "access",
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_moderator_token(user_id: str) -> tuple[str, int]:
    """Short-lived moderator session. Returns (token, expires_in seconds)."""
    expires_in = settings.moderator_token_expire_minutes * 60
    token = create_access_token(user_id, is_moderator=True, expires_delta=timedelta(seconds=expires_in))
    return token, expires_in


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify a token. Returns None if it is invalid or expired."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None


def caller_from_token(token: str) -> Optional[Caller]:
    payload = decode_token(token)
    if payload is None or payload.get("type") != "access" or not payload.get("sub"):
        return None
    return Caller(user_id=payload["sub"], is_moderator=bool(payload.get("mod", False)))
