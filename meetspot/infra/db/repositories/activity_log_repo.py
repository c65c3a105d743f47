"""Activity log repository implementation."""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from meetspot.domain.audit.models import ActivityLogEntry, ActivityLogType
from meetspot.domain.audit.services import ActivityLogRepository
from meetspot.infra.db.models.activity_log import ActivityLogModel


class ActivityLogRepositoryImpl(ActivityLogRepository):
    """Activity log repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        model = ActivityLogModel.from_entity(entry)
        self.session.add(model)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return entry

    async def list_recent(
        self, limit: int = 100, log_type: Optional[ActivityLogType] = None
    ) -> list[ActivityLogEntry]:
        query = select(ActivityLogModel)
        if log_type is not None:
            query = query.where(ActivityLogModel.log_type == log_type.value)
        result = await self.session.execute(
            query.order_by(ActivityLogModel.created_at.desc()).limit(limit)
        )
        return [m.to_entity() for m in result.scalars().all()]
