"""Pytest configuration: in-memory database, service fixtures and test doubles."""
from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from meetspot.domain.access.policies import AccessControlEngine
from meetspot.domain.activity.services import ActivityService
from meetspot.domain.common.types import Caller
from meetspot.domain.friends.services import FriendshipService
from meetspot.domain.moderation.services import ModerationService
from meetspot.domain.verification.services import VerificationService
from meetspot.infra.db import models  # noqa: F401
from meetspot.infra.db.base import Base
from meetspot.infra.db.repositories.activity_log_repo import ActivityLogRepositoryImpl
from meetspot.infra.db.repositories.activity_repo import ActivityRepositoryImpl
from meetspot.infra.db.repositories.friendship_repo import FriendshipRepositoryImpl
from meetspot.infra.db.repositories.moderation_repo import (
    BusinessProfileRepositoryImpl,
    ReportRepositoryImpl,
)
from meetspot.infra.db.repositories.verification_repo import VerificationRepositoryImpl

TODAY = date(2026, 10, 17)


class RecordingNotifier:
    """Notifier that keeps what it was asked to send."""

    def __init__(self):
        self.sent: list[tuple[str, str, dict]] = []

    async def send(self, user_id: str, notification_type: str, payload: dict) -> None:
        self.sent.append((user_id, notification_type, payload))

    def of_type(self, notification_type: str) -> list[tuple[str, str, dict]]:
        return [n for n in self.sent if n[1] == notification_type]


class FailingNotifier:
    """Notifier whose delivery always fails."""

    async def send(self, user_id: str, notification_type: str, payload: dict) -> None:
        raise ConnectionError("push gateway down")


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def moderator():
    return Caller(user_id="mod-1", is_moderator=True)


@pytest.fixture
def log_repo(db_session):
    return ActivityLogRepositoryImpl(db_session)


@pytest.fixture
def friendship_repo(db_session):
    return FriendshipRepositoryImpl(db_session)


@pytest.fixture
def friendship_service(friendship_repo):
    return FriendshipService(friendship_repo)


@pytest.fixture
def activity_repo(db_session):
    return ActivityRepositoryImpl(db_session)


@pytest.fixture
def activity_service(activity_repo, friendship_service, log_repo):
    return ActivityService(
        activity_repo,
        AccessControlEngine(friendship_service),
        activity_log=log_repo,
        join_max_attempts=3,
    )


@pytest.fixture
def verification_repo(db_session):
    return VerificationRepositoryImpl(db_session)


@pytest.fixture
def verification_service(verification_repo, notifier, log_repo):
    return VerificationService(
        verification_repo,
        notifier=notifier,
        activity_log=log_repo,
        today=lambda: TODAY,
    )


@pytest.fixture
def moderation_service(db_session, notifier, log_repo):
    return ModerationService(
        ReportRepositoryImpl(db_session),
        BusinessProfileRepositoryImpl(db_session),
        notifier=notifier,
        activity_log=log_repo,
    )


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def failing_notifier():
    return FailingNotifier()
