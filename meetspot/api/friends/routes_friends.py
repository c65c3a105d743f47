"""Friend graph routes."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from meetspot.api.deps import get_current_caller, get_friendship_service
from meetspot.domain.common.types import Caller
from meetspot.domain.friends.models import Friendship
from meetspot.domain.friends.services import FriendshipService

router = APIRouter()


class FriendRequest(BaseModel):
    """Friend request body."""
    user_id: str


class FriendshipResponse(BaseModel):
    """Friendship edge as seen by the caller."""
    id: str
    user_id: str  # the other party
    requester_id: str
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_edge(cls, edge: Friendship, viewer_id: str) -> "FriendshipResponse":
        return cls(
            id=edge.id,
            user_id=edge.other(viewer_id),
            requester_id=edge.requester_id,
            status=edge.status.value,
            created_at=edge.created_at,
            updated_at=edge.updated_at,
        )


class FriendStatusResponse(BaseModel):
    """Relation between the caller and another user."""
    user_id: str
    status: str  # "none" when there is no edge
    requester_id: Optional[str] = None
    are_friends: bool


@router.post("/requests", response_model=FriendshipResponse, status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    request: FriendRequest,
    caller: Caller = Depends(get_current_caller),
    service: FriendshipService = Depends(get_friendship_service),
):
    """Send a friend request."""
    edge = await service.send_request(caller.user_id, request.user_id)
    return FriendshipResponse.from_edge(edge, caller.user_id)


@router.post("/requests/{user_id}/accept", response_model=FriendshipResponse)
async def accept_friend_request(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    service: FriendshipService = Depends(get_friendship_service),
):
    """Accept the pending request `user_id` sent to the caller."""
    edge = await service.accept(requester_id=user_id, by_user_id=caller.user_id)
    return FriendshipResponse.from_edge(edge, caller.user_id)


@router.post("/{user_id}/block", response_model=FriendshipResponse)
async def block_user(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    service: FriendshipService = Depends(get_friendship_service),
):
    edge = await service.block(caller.user_id, user_id)
    return FriendshipResponse.from_edge(edge, caller.user_id)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_friend(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    service: FriendshipService = Depends(get_friendship_service),
):
    """Unfriend, cancel a sent request or decline a received one."""
    await service.remove(caller.user_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=list[FriendshipResponse])
async def list_friends(
    caller: Caller = Depends(get_current_caller),
    service: FriendshipService = Depends(get_friendship_service),
):
    edges = await service.list_friends(caller.user_id)
    return [FriendshipResponse.from_edge(e, caller.user_id) for e in edges]


@router.get("/pending", response_model=list[FriendshipResponse])
async def list_pending_requests(
    caller: Caller = Depends(get_current_caller),
    service: FriendshipService = Depends(get_friendship_service),
):
    """Incoming requests awaiting the caller's answer."""
    edges = await service.list_pending(caller.user_id)
    return [FriendshipResponse.from_edge(e, caller.user_id) for e in edges]


@router.get("/sent", response_model=list[FriendshipResponse])
async def list_sent_requests(
    caller: Caller = Depends(get_current_caller),
    service: FriendshipService = Depends(get_friendship_service),
):
    edges = await service.list_sent(caller.user_id)
    return [FriendshipResponse.from_edge(e, caller.user_id) for e in edges]


@router.get("/{user_id}/status", response_model=FriendStatusResponse)
async def get_friend_status(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    service: FriendshipService = Depends(get_friendship_service),
):
    edge = await service.get_edge(caller.user_id, user_id)
    if edge is None:
        return FriendStatusResponse(user_id=user_id, status="none", are_friends=False)
    return FriendStatusResponse(
        user_id=user_id,
        status=edge.status.value,
        requester_id=edge.requester_id,
        are_friends=await service.are_friends(caller.user_id, user_id),
    )
