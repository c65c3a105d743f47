"""Activity routes: creation, admission and membership."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from meetspot.api.deps import get_activity_service, get_current_caller
from meetspot.domain.activity.models import Activity
from meetspot.domain.activity.services import ActivityService
from meetspot.domain.common.types import Caller

router = APIRouter()


class CreateActivityRequest(BaseModel):
    """Create activity request."""
    title: str
    description: Optional[str] = None
    latitude: float
    longitude: float
    visibility: str = "public"  # public | friends | private
    password: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=1)
    starts_at: Optional[datetime] = None


class PasswordRequest(BaseModel):
    """Optional access code supplied by the joining user."""
    password: Optional[str] = None


class ActivityResponse(BaseModel):
    """Activity response. The access code itself is never returned."""
    id: str
    host_user_id: str
    title: str
    description: Optional[str]
    latitude: float
    longitude: float
    visibility: str
    has_password: bool
    joined_user_ids: list[str]
    participant_count: int
    capacity: Optional[int]
    is_closed: bool
    starts_at: Optional[datetime]
    created_at: datetime

    @classmethod
    def from_activity(cls, activity: Activity) -> "ActivityResponse":
        return cls(
            id=activity.id,
            host_user_id=activity.host_user_id,
            title=activity.title,
            description=activity.description,
            latitude=activity.latitude,
            longitude=activity.longitude,
            visibility=activity.visibility,
            has_password=activity.has_password,
            joined_user_ids=activity.joined_user_ids,
            participant_count=len(activity.joined_user_ids),
            capacity=activity.capacity,
            is_closed=activity.is_closed,
            starts_at=activity.starts_at,
            created_at=activity.created_at,
        )


class AccessCheckResponse(BaseModel):
    """Admission decision."""
    can_join: bool
    reason: Optional[str] = None
    requires_password: bool


@router.post("", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def create_activity(
    request: CreateActivityRequest,
    caller: Caller = Depends(get_current_caller),
    service: ActivityService = Depends(get_activity_service),
):
    activity = await service.create_activity(
        host_user_id=caller.user_id,
        title=request.title,
        latitude=request.latitude,
        longitude=request.longitude,
        visibility=request.visibility,
        password=request.password,
        capacity=request.capacity,
        description=request.description,
        starts_at=request.starts_at,
    )
    return ActivityResponse.from_activity(activity)


@router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity(
    activity_id: str,
    caller: Caller = Depends(get_current_caller),
    service: ActivityService = Depends(get_activity_service),
):
    return ActivityResponse.from_activity(await service.get_activity(activity_id))


@router.post("/{activity_id}/check-access", response_model=AccessCheckResponse)
async def check_access(
    activity_id: str,
    request: PasswordRequest,
    caller: Caller = Depends(get_current_caller),
    service: ActivityService = Depends(get_activity_service),
):
    """Tell the client whether joining would succeed and what is missing."""
    decision = await service.check_access(activity_id, caller.user_id, request.password)
    return AccessCheckResponse(
        can_join=decision.allowed,
        reason=decision.reason.value if decision.reason else None,
        requires_password=decision.requires_password,
    )


@router.post("/{activity_id}/join", response_model=ActivityResponse)
async def join_activity(
    activity_id: str,
    request: PasswordRequest,
    caller: Caller = Depends(get_current_caller),
    service: ActivityService = Depends(get_activity_service),
):
    activity = await service.join(activity_id, caller.user_id, request.password)
    return ActivityResponse.from_activity(activity)


@router.post("/{activity_id}/leave", response_model=ActivityResponse)
async def leave_activity(
    activity_id: str,
    caller: Caller = Depends(get_current_caller),
    service: ActivityService = Depends(get_activity_service),
):
    activity = await service.leave(activity_id, caller.user_id)
    return ActivityResponse.from_activity(activity)


@router.post("/{activity_id}/close", response_model=ActivityResponse)
async def close_activity(
    activity_id: str,
    caller: Caller = Depends(get_current_caller),
    service: ActivityService = Depends(get_activity_service),
):
    """Host or moderator only."""
    activity = await service.close(activity_id, caller)
    return ActivityResponse.from_activity(activity)


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_activity(
    activity_id: str,
    caller: Caller = Depends(get_current_caller),
    service: ActivityService = Depends(get_activity_service),
):
    """Host or moderator only."""
    await service.delete(activity_id, caller)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
