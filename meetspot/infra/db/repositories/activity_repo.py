"""Activity repository implementation."""
from typing import Optional

from sqlalchemy import and_, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from meetspot.domain.activity.models import Activity
from meetspot.domain.activity.services import ActivityRepository
from meetspot.domain.common.types import utcnow
from meetspot.infra.db.models.activity import ActivityModel


class ActivityRepositoryImpl(ActivityRepository):
    """Activity repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, activity: Activity) -> Activity:
        model = ActivityModel.from_entity(activity)
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return model.to_entity()

    async def get(self, activity_id: str) -> Optional[Activity]:
        """Get activity by ID, always reading the current row."""
        result = await self.session.execute(
            select(ActivityModel)
            .where(ActivityModel.id == activity_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def update_members(
        self, activity_id: str, expected_version: int, joined_user_ids: list[str]
    ) -> Optional[Activity]:
        """Compare-and-swap the joined set on the version column."""
        result = await self.session.execute(
            update(ActivityModel)
            .where(
                and_(
                    ActivityModel.id == activity_id,
                    ActivityModel.version == expected_version,
                )
            )
            .values(
                joined_user_ids=list(joined_user_ids),
                version=expected_version + 1,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        if result.rowcount != 1:
            return None
        return await self.get(activity_id)

    async def mark_closed(self, activity_id: str) -> Optional[Activity]:
        result = await self.session.execute(
            update(ActivityModel)
            .where(ActivityModel.id == activity_id)
            .values(is_closed=True, version=ActivityModel.version + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        if result.rowcount == 0:
            return None
        return await self.get(activity_id)

    async def delete(self, activity_id: str) -> bool:
        result = await self.session.execute(
            delete(ActivityModel)
            .where(ActivityModel.id == activity_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount > 0
