"""Business profile routes for owners."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from meetspot.api.deps import get_current_caller, get_moderation_service
from meetspot.domain.common.types import Caller
from meetspot.domain.moderation.models import BusinessProfile
from meetspot.domain.moderation.services import ModerationService

router = APIRouter()


class CreateBusinessRequest(BaseModel):
    business_name: str
    description: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None


class BuyCreditsRequest(BaseModel):
    amount: int = Field(gt=0)


class BusinessProfileResponse(BaseModel):
    """Business profile response."""
    id: str
    owner_user_id: str
    business_name: str
    description: Optional[str]
    website: Optional[str]
    phone: Optional[str]
    status: str
    can_create_activities: bool
    can_promote_activities: bool
    promotion_credits: int
    verified_at: Optional[datetime]
    verified_by: Optional[str]
    created_at: datetime

    @classmethod
    def from_profile(cls, profile: BusinessProfile) -> "BusinessProfileResponse":
        data = profile.model_dump(exclude={"updated_at"})
        data["status"] = profile.status.value
        return cls(**data)


@router.post("", response_model=BusinessProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_business_profile(
    request: CreateBusinessRequest,
    caller: Caller = Depends(get_current_caller),
    service: ModerationService = Depends(get_moderation_service),
):
    """Register the caller's business. It stays pending until a moderator verifies it."""
    profile = await service.create_business_profile(
        owner_user_id=caller.user_id,
        business_name=request.business_name,
        description=request.description,
        website=request.website,
        phone=request.phone,
    )
    return BusinessProfileResponse.from_profile(profile)


@router.post("/{business_id}/credits", response_model=BusinessProfileResponse)
async def buy_promotion_credits(
    business_id: str,
    request: BuyCreditsRequest,
    caller: Caller = Depends(get_current_caller),
    service: ModerationService = Depends(get_moderation_service),
):
    # Payment is settled by the payment provider before this call
    profile = await service.add_promotion_credits(caller, business_id, request.amount)
    return BusinessProfileResponse.from_profile(profile)
