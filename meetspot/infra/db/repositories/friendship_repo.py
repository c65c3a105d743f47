"""Friendship repository implementation."""
from typing import Optional

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meetspot.domain.common.errors import ConflictError
from meetspot.domain.common.types import utcnow
from meetspot.domain.friends.models import FriendStatus, Friendship, canonical_pair
from meetspot.domain.friends.services import FriendshipRepository
from meetspot.infra.db.models.friendship import FriendshipModel


class FriendshipRepositoryImpl(FriendshipRepository):
    """Friendship repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, friendship_id: str) -> Optional[Friendship]:
        result = await self.session.execute(
            select(FriendshipModel)
            .where(FriendshipModel.id == friendship_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def get_between(self, user_a: str, user_b: str) -> Optional[Friendship]:
        """Get the edge for the pair via its canonical key."""
        low, high = canonical_pair(user_a, user_b)
        result = await self.session.execute(
            select(FriendshipModel)
            .where(
                and_(
                    FriendshipModel.user_low_id == low,
                    FriendshipModel.user_high_id == high,
                )
            )
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def create(self, friendship: Friendship) -> Friendship:
        """Insert an edge; the pair's unique constraint rejects a second one."""
        model = FriendshipModel.from_entity(friendship)
        self.session.add(model)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("An edge already exists for this user pair")
        await self.session.refresh(model)
        return model.to_entity()

    async def update_status(
        self,
        friendship_id: str,
        expected_status: FriendStatus,
        new_status: FriendStatus,
        requester_id: Optional[str] = None,
    ) -> Optional[Friendship]:
        """Set the status only if it is still `expected_status`."""
        values = {"status": new_status, "updated_at": utcnow()}
        if requester_id is not None:
            values["requester_id"] = requester_id
        result = await self.session.execute(
            update(FriendshipModel)
            .where(
                and_(
                    FriendshipModel.id == friendship_id,
                    FriendshipModel.status == expected_status,
                )
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        if result.rowcount == 0:
            return None
        return await self._get(friendship_id)

    async def delete(self, friendship_id: str) -> None:
        await self.session.execute(
            delete(FriendshipModel)
            .where(FriendshipModel.id == friendship_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()

    async def list_for_user(self, user_id: str, status: FriendStatus) -> list[Friendship]:
        result = await self.session.execute(
            select(FriendshipModel)
            .where(
                and_(
                    or_(
                        FriendshipModel.user_low_id == user_id,
                        FriendshipModel.user_high_id == user_id,
                    ),
                    FriendshipModel.status == status,
                )
            )
            .order_by(FriendshipModel.updated_at.desc())
            .execution_options(populate_existing=True)
        )
        return [m.to_entity() for m in result.scalars().all()]

    async def list_incoming(self, user_id: str, status: FriendStatus) -> list[Friendship]:
        result = await self.session.execute(
            select(FriendshipModel)
            .where(
                and_(
                    or_(
                        FriendshipModel.user_low_id == user_id,
                        FriendshipModel.user_high_id == user_id,
                    ),
                    FriendshipModel.requester_id != user_id,
                    FriendshipModel.status == status,
                )
            )
            .order_by(FriendshipModel.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return [m.to_entity() for m in result.scalars().all()]

    async def list_outgoing(self, user_id: str, status: FriendStatus) -> list[Friendship]:
        result = await self.session.execute(
            select(FriendshipModel)
            .where(
                and_(
                    FriendshipModel.requester_id == user_id,
                    FriendshipModel.status == status,
                )
            )
            .order_by(FriendshipModel.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return [m.to_entity() for m in result.scalars().all()]
