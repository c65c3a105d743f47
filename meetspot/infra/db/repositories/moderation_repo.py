"""Report and business profile repository implementations."""
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meetspot.domain.common.errors import ConflictError
from meetspot.domain.common.types import utcnow
from meetspot.domain.moderation.models import BusinessProfile, Report, ReportStatus
from meetspot.domain.moderation.services import BusinessProfileRepository, ReportRepository
from meetspot.infra.db.models.moderation import BusinessProfileModel, ReportModel


class ReportRepositoryImpl(ReportRepository):
    """Report repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, report: Report) -> Report:
        model = ReportModel.from_entity(report)
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return model.to_entity()

    async def get(self, report_id: str) -> Optional[Report]:
        result = await self.session.execute(
            select(ReportModel)
            .where(ReportModel.id == report_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def update_status(self, report_id: str, status: ReportStatus) -> Optional[Report]:
        result = await self.session.execute(
            update(ReportModel)
            .where(ReportModel.id == report_id)
            .values(status=status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        if result.rowcount == 0:
            return None
        return await self.get(report_id)

    async def list_by_status(self, status: Optional[ReportStatus] = None) -> list[Report]:
        query = select(ReportModel)
        if status is not None:
            query = query.where(ReportModel.status == status)
        result = await self.session.execute(
            query.order_by(ReportModel.created_at.desc()).execution_options(populate_existing=True)
        )
        return [m.to_entity() for m in result.scalars().all()]


class BusinessProfileRepositoryImpl(BusinessProfileRepository):
    """Business profile repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, profile: BusinessProfile) -> BusinessProfile:
        model = BusinessProfileModel.from_entity(profile)
        self.session.add(model)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("User already has a business profile")
        await self.session.refresh(model)
        return model.to_entity()

    async def get(self, business_id: str) -> Optional[BusinessProfile]:
        result = await self.session.execute(
            select(BusinessProfileModel)
            .where(BusinessProfileModel.id == business_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def get_by_owner(self, owner_user_id: str) -> Optional[BusinessProfile]:
        result = await self.session.execute(
            select(BusinessProfileModel)
            .where(BusinessProfileModel.owner_user_id == owner_user_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def update(self, business_id: str, changes: dict) -> Optional[BusinessProfile]:
        """Write only the given columns; the rest keep their stored values."""
        result = await self.session.execute(
            update(BusinessProfileModel)
            .where(BusinessProfileModel.id == business_id)
            .values(**changes, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        if result.rowcount == 0:
            return None
        return await self.get(business_id)

    async def add_credits(self, business_id: str, amount: int) -> Optional[BusinessProfile]:
        result = await self.session.execute(
            update(BusinessProfileModel)
            .where(BusinessProfileModel.id == business_id)
            .values(
                promotion_credits=BusinessProfileModel.promotion_credits + amount,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        if result.rowcount == 0:
            return None
        return await self.get(business_id)
