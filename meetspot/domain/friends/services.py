"""Friendship domain services."""
import logging
from typing import Optional, Protocol

from meetspot.domain.common.errors import (
    ConflictError,
    InvalidOperationError,
    InvalidStateError,
    NotAuthorizedError,
    NotFoundError,
)
from meetspot.domain.friends.models import FriendStatus, Friendship

logger = logging.getLogger(__name__)


class FriendshipRepository(Protocol):
    """Friendship repository protocol."""

    async def get_between(self, user_a: str, user_b: str) -> Optional[Friendship]:
        """Get the edge between two users, whichever direction it was created in."""
        ...

    async def create(self, friendship: Friendship) -> Friendship:
        """Insert an edge. Raises ConflictError if the pair already has one."""
        ...

    async def update_status(
        self,
        friendship_id: str,
        expected_status: FriendStatus,
        new_status: FriendStatus,
        requester_id: Optional[str] = None,
    ) -> Optional[Friendship]:
        """Compare-and-swap the status. Returns None if the edge is gone or its status moved on."""
        ...

    async def delete(self, friendship_id: str) -> None:
        """Delete an edge."""
        ...

    async def list_for_user(self, user_id: str, status: FriendStatus) -> list[Friendship]:
        """List edges with `status` involving the user in either position."""
        ...

    async def list_incoming(self, user_id: str, status: FriendStatus) -> list[Friendship]:
        """List edges with `status` the user did not request."""
        ...

    async def list_outgoing(self, user_id: str, status: FriendStatus) -> list[Friendship]:
        """List edges with `status` the user requested."""
        ...


class FriendshipService:
    """Friend relations and their lifecycle."""

    def __init__(self, friendship_repo: FriendshipRepository):
        self.friendship_repo = friendship_repo

    async def send_request(self, from_user_id: str, to_user_id: str) -> Friendship:
        """Send a friend request."""
        if from_user_id == to_user_id:
            raise InvalidOperationError("Cannot send a friend request to yourself")

        existing = await self.friendship_repo.get_between(from_user_id, to_user_id)
        if existing:
            if existing.status == FriendStatus.ACCEPTED:
                raise InvalidOperationError("Already friends")
            if existing.status == FriendStatus.PENDING:
                raise InvalidOperationError("Friend request already pending")
            raise InvalidOperationError("Cannot send friend request")

        try:
            created = await self.friendship_repo.create(
                Friendship.create(requester_id=from_user_id, target_id=to_user_id)
            )
        except ConflictError:
            # Lost the race against a concurrent request for the same pair
            raise InvalidOperationError("Friend request already pending")

        logger.info("Friend request %s -> %s created (id=%s)", from_user_id, to_user_id, created.id)
        return created

    async def accept(self, requester_id: str, by_user_id: str) -> Friendship:
        """Accept the pending request `requester_id` sent to `by_user_id`."""
        edge = await self.friendship_repo.get_between(requester_id, by_user_id)
        if edge is None or requester_id == by_user_id:
            raise NotFoundError("FriendRequest", f"{requester_id}->{by_user_id}")
        if edge.status != FriendStatus.PENDING:
            raise InvalidStateError(f"Friend request is {edge.status.value}, not pending")
        if edge.target_id != by_user_id:
            raise NotAuthorizedError("Only the recipient can accept a friend request")

        updated = await self.friendship_repo.update_status(
            edge.id, FriendStatus.PENDING, FriendStatus.ACCEPTED
        )
        if updated is None:
            raise InvalidStateError("Friend request was resolved concurrently")

        logger.info("Friend request %s -> %s accepted", requester_id, by_user_id)
        return updated

    async def block(self, by_user_id: str, other_user_id: str) -> Friendship:
        """Block another user. Any existing edge becomes a block owned by `by_user_id`."""
        if by_user_id == other_user_id:
            raise InvalidOperationError("Cannot block yourself")

        edge = await self.friendship_repo.get_between(by_user_id, other_user_id)
        if edge is None:
            blocked = await self.friendship_repo.create(
                Friendship.create(
                    requester_id=by_user_id,
                    target_id=other_user_id,
                    status=FriendStatus.BLOCKED,
                )
            )
        else:
            if edge.status == FriendStatus.BLOCKED and edge.requester_id != by_user_id:
                raise InvalidStateError("Pair is already blocked by the other user")
            blocked = await self.friendship_repo.update_status(
                edge.id, edge.status, FriendStatus.BLOCKED, requester_id=by_user_id
            )
            if blocked is None:
                raise ConflictError("Friendship changed concurrently; retry")

        logger.info("User %s blocked %s", by_user_id, other_user_id)
        return blocked

    async def remove(self, user_id: str, other_user_id: str) -> None:
        """Unfriend, cancel or decline. Succeeds even if there is nothing to remove."""
        edge = await self.friendship_repo.get_between(user_id, other_user_id)
        if edge is None:
            return
        if edge.status == FriendStatus.BLOCKED and edge.requester_id != user_id:
            logger.info("User %s tried to remove a block placed by %s; ignored", user_id, edge.requester_id)
            return
        await self.friendship_repo.delete(edge.id)
        logger.info("Friendship %s between %s and %s removed", edge.id, user_id, other_user_id)

    async def are_friends(self, user_a: str, user_b: str) -> bool:
        """True iff the pair has an accepted edge, independent of direction."""
        if user_a == user_b:
            return False
        edge = await self.friendship_repo.get_between(user_a, user_b)
        return edge is not None and edge.status == FriendStatus.ACCEPTED

    async def get_edge(self, user_a: str, user_b: str) -> Optional[Friendship]:
        return await self.friendship_repo.get_between(user_a, user_b)

    async def list_friends(self, user_id: str) -> list[Friendship]:
        """Accepted friendships of a user."""
        return await self.friendship_repo.list_for_user(user_id, FriendStatus.ACCEPTED)

    async def list_pending(self, user_id: str) -> list[Friendship]:
        """Incoming pending requests."""
        return await self.friendship_repo.list_incoming(user_id, FriendStatus.PENDING)

    async def list_sent(self, user_id: str) -> list[Friendship]:
        """Outgoing pending requests."""
        return await self.friendship_repo.list_outgoing(user_id, FriendStatus.PENDING)
