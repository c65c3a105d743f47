"""Moderator authentication routes."""
import logging
import secrets

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from meetspot.infra.security.jwt import create_moderator_token
from meetspot.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()


class AdminLoginRequest(BaseModel):
    """Admin login request model."""
    user_id: str
    password: str


class TokenResponse(BaseModel):
    """Token response model."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int


@router.post("/auth", response_model=TokenResponse)
async def admin_login(request: AdminLoginRequest):
    """Exchange the shared admin password for a short-lived moderator token."""
    if not settings.admin_password:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Moderator login is not configured",
        )
    if not secrets.compare_digest(request.password.encode(), settings.admin_password.encode()):
        logger.warning("Failed moderator login for user %s", request.user_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin password",
        )

    token, expires_in = create_moderator_token(request.user_id)
    logger.info("Moderator session issued for user %s", request.user_id)
    return TokenResponse(access_token=token, expires_in=expires_in)
