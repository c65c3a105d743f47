"""Report filing routes."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from meetspot.api.deps import get_current_caller, get_moderation_service
from meetspot.domain.common.types import Caller
from meetspot.domain.moderation.models import Report
from meetspot.domain.moderation.services import ModerationService

router = APIRouter()


class CreateReportRequest(BaseModel):
    reported_activity_id: Optional[str] = None
    reported_user_id: Optional[str] = None
    reason: str
    comment: Optional[str] = None


class ReportResponse(BaseModel):
    """Report response."""
    id: str
    reporter_id: str
    reported_activity_id: Optional[str]
    reported_user_id: Optional[str]
    reason: str
    comment: Optional[str]
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_report(cls, report: Report) -> "ReportResponse":
        return cls(**{**report.model_dump(), "status": report.status.value})


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    request: CreateReportRequest,
    caller: Caller = Depends(get_current_caller),
    service: ModerationService = Depends(get_moderation_service),
):
    """File a report about an activity or a user."""
    report = await service.create_report(
        reporter_id=caller.user_id,
        reason=request.reason,
        reported_activity_id=request.reported_activity_id,
        reported_user_id=request.reported_user_id,
        comment=request.comment,
    )
    return ReportResponse.from_report(report)
