"""Verification record repository implementation."""
import logging
from typing import Optional

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meetspot.domain.verification.models import VerificationRecord
from meetspot.domain.verification.services import VerificationRepository
from meetspot.infra.db.models.verification import VerificationRecordModel

logger = logging.getLogger(__name__)


class VerificationRepositoryImpl(VerificationRepository):
    """Verification record repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str) -> Optional[VerificationRecord]:
        result = await self.session.execute(
            select(VerificationRecordModel)
            .where(VerificationRecordModel.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def compare_and_swap(self, record: VerificationRecord, expected_version: int) -> bool:
        """Insert when `expected_version` is 0, otherwise update on a version match."""
        if expected_version == 0:
            self.session.add(VerificationRecordModel.from_entity(record))
            try:
                await self.session.commit()
            except IntegrityError:
                await self.session.rollback()
                logger.info("Verification record for user %s was created concurrently", record.user_id)
                return False
            return True

        values = VerificationRecordModel.columns_from_entity(record)
        values.pop("user_id")
        result = await self.session.execute(
            update(VerificationRecordModel)
            .where(
                and_(
                    VerificationRecordModel.user_id == record.user_id,
                    VerificationRecordModel.version == expected_version,
                )
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount == 1

    async def list_pending_reviews(self) -> list[VerificationRecord]:
        result = await self.session.execute(
            select(VerificationRecordModel)
            .where(
                or_(
                    VerificationRecordModel.id_status == "pending",
                    VerificationRecordModel.face_status == "pending",
                )
            )
            .order_by(VerificationRecordModel.updated_at.asc())
            .execution_options(populate_existing=True)
        )
        return [m.to_entity() for m in result.scalars().all()]
