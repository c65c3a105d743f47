"""Moderator routes for reports, business profiles and the activity log."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from meetspot.api.business.routes_business import BusinessProfileResponse
from meetspot.api.deps import (
    get_activity_log_service,
    get_current_caller,
    get_moderation_service,
)
from meetspot.api.reports.routes_reports import ReportResponse
from meetspot.domain.audit.models import ActivityLogType
from meetspot.domain.audit.services import ActivityLogService
from meetspot.domain.common.errors import ValidationError
from meetspot.domain.common.types import Caller
from meetspot.domain.moderation.models import CapabilityOverrides
from meetspot.domain.moderation.services import ModerationService
from meetspot.settings import settings

router = APIRouter()


class ReportStatusRequest(BaseModel):
    status: str  # open | reviewed | dismissed


class CapabilitiesRequest(BaseModel):
    """Fields left out are not changed."""
    can_create_activities: Optional[bool] = None
    can_promote_activities: Optional[bool] = None
    promotion_credits: Optional[int] = None

    def to_overrides(self) -> CapabilityOverrides:
        return CapabilityOverrides(**self.model_dump())


class BusinessStatusRequest(CapabilitiesRequest):
    status: str  # pending | verified | rejected | suspended


class ActivityLogResponse(BaseModel):
    id: str
    user_id: Optional[str]
    log_type: str
    activity_id: Optional[str]
    metadata: Optional[dict]
    created_at: datetime


@router.get("/reports", response_model=list[ReportResponse])
async def list_reports(
    status: Optional[str] = None,
    caller: Caller = Depends(get_current_caller),
    service: ModerationService = Depends(get_moderation_service),
):
    reports = await service.list_reports(caller, status=status)
    return [ReportResponse.from_report(r) for r in reports]


@router.patch("/reports/{report_id}", response_model=ReportResponse)
async def update_report_status(
    report_id: str,
    request: ReportStatusRequest,
    caller: Caller = Depends(get_current_caller),
    service: ModerationService = Depends(get_moderation_service),
):
    report = await service.set_report_status(caller, report_id, request.status)
    return ReportResponse.from_report(report)


@router.post("/businesses/{business_id}/status", response_model=BusinessProfileResponse)
async def set_business_status(
    business_id: str,
    request: BusinessStatusRequest,
    caller: Caller = Depends(get_current_caller),
    service: ModerationService = Depends(get_moderation_service),
):
    """Set the status; capability fields in the body are applied in the same write."""
    profile = await service.set_business_status(
        caller, business_id, request.status, overrides=request.to_overrides()
    )
    return BusinessProfileResponse.from_profile(profile)


@router.patch("/businesses/{business_id}/capabilities", response_model=BusinessProfileResponse)
async def update_business_capabilities(
    business_id: str,
    request: CapabilitiesRequest,
    caller: Caller = Depends(get_current_caller),
    service: ModerationService = Depends(get_moderation_service),
):
    profile = await service.update_capabilities(caller, business_id, request.to_overrides())
    return BusinessProfileResponse.from_profile(profile)


@router.get("/logs", response_model=list[ActivityLogResponse])
async def list_activity_logs(
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    log_type: Optional[str] = None,
    caller: Caller = Depends(get_current_caller),
    service: ActivityLogService = Depends(get_activity_log_service),
):
    parsed_type = None
    if log_type is not None:
        try:
            parsed_type = ActivityLogType(log_type)
        except ValueError:
            raise ValidationError(f"Unknown log type: {log_type!r}")
    entries = await service.list_logs(
        caller, limit=limit or settings.activity_log_page_size, log_type=parsed_type
    )
    return [
        ActivityLogResponse(**{**e.model_dump(), "log_type": e.log_type.value}) for e in entries
    ]
