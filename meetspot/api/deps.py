"""API dependencies."""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from meetspot.domain.access.policies import AccessControlEngine
from meetspot.domain.activity.services import ActivityService
from meetspot.domain.audit.services import ActivityLogService
from meetspot.domain.common.errors import NotAuthorizedError
from meetspot.domain.common.notifications import Notifier
from meetspot.domain.common.types import Caller, utcnow
from meetspot.domain.friends.services import FriendshipService
from meetspot.domain.moderation.services import ModerationService
from meetspot.domain.verification.services import VerificationService
from meetspot.infra.db.repositories.activity_log_repo import ActivityLogRepositoryImpl
from meetspot.infra.db.repositories.activity_repo import ActivityRepositoryImpl
from meetspot.infra.db.repositories.friendship_repo import FriendshipRepositoryImpl
from meetspot.infra.db.repositories.moderation_repo import (
    BusinessProfileRepositoryImpl,
    ReportRepositoryImpl,
)
from meetspot.infra.db.repositories.verification_repo import VerificationRepositoryImpl
from meetspot.infra.db.session import get_db
from meetspot.infra.messaging.notify import get_notifier
from meetspot.infra.security.jwt import caller_from_token
from meetspot.settings import settings

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/admin/auth")


async def get_current_caller(token: str = Depends(oauth2_scheme)) -> Caller:
    """Resolve the bearer token to the calling identity."""
    caller = caller_from_token(token)
    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller


async def get_current_moderator(caller: Caller = Depends(get_current_caller)) -> Caller:
    """Like get_current_caller, but only moderators get through."""
    if not caller.is_moderator:
        raise NotAuthorizedError("Moderator role required")
    return caller


def get_friendship_service(db: AsyncSession = Depends(get_db)) -> FriendshipService:
    return FriendshipService(FriendshipRepositoryImpl(db))


def get_activity_service(
    db: AsyncSession = Depends(get_db),
    friendship_service: FriendshipService = Depends(get_friendship_service),
) -> ActivityService:
    return ActivityService(
        ActivityRepositoryImpl(db),
        AccessControlEngine(friendship_service),
        activity_log=ActivityLogRepositoryImpl(db),
        join_max_attempts=settings.join_max_attempts,
    )


def get_verification_service(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> VerificationService:
    return VerificationService(
        VerificationRepositoryImpl(db),
        notifier=notifier,
        activity_log=ActivityLogRepositoryImpl(db),
        today=lambda: utcnow().date(),
        min_age=settings.min_age,
        max_age=settings.max_age,
        max_face_confidence=settings.max_face_confidence,
        decision_max_attempts=settings.decision_max_attempts,
    )


def get_moderation_service(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> ModerationService:
    return ModerationService(
        ReportRepositoryImpl(db),
        BusinessProfileRepositoryImpl(db),
        notifier=notifier,
        activity_log=ActivityLogRepositoryImpl(db),
    )


def get_activity_log_service(db: AsyncSession = Depends(get_db)) -> ActivityLogService:
    return ActivityLogService(ActivityLogRepositoryImpl(db))
