"""Moderator review of ID and face verifications."""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from meetspot.api.deps import get_current_caller, get_verification_service
from meetspot.api.verification.schemas import VerificationResponse
from meetspot.domain.common.types import Caller
from meetspot.domain.verification.services import VerificationService

router = APIRouter()


class IdDecisionRequest(BaseModel):
    decision: str  # verify | reject
    reason: Optional[str] = None


class FaceDecisionRequest(BaseModel):
    decision: str  # verify | reject
    confidence: Optional[float] = None


@router.get("", response_model=list[VerificationResponse])
async def list_pending_verifications(
    caller: Caller = Depends(get_current_caller),
    service: VerificationService = Depends(get_verification_service),
):
    """Records with an ID document or face check awaiting review."""
    records = await service.list_pending_reviews(caller)
    return [VerificationResponse.from_record(r) for r in records]


@router.post("/{user_id}/id", response_model=VerificationResponse)
async def decide_id_document(
    user_id: str,
    request: IdDecisionRequest,
    caller: Caller = Depends(get_current_caller),
    service: VerificationService = Depends(get_verification_service),
):
    record = await service.moderator_decide_id(caller, user_id, request.decision, request.reason)
    return VerificationResponse.from_record(record)


@router.post("/{user_id}/face", response_model=VerificationResponse)
async def decide_face(
    user_id: str,
    request: FaceDecisionRequest,
    caller: Caller = Depends(get_current_caller),
    service: VerificationService = Depends(get_verification_service),
):
    record = await service.moderator_decide_face(caller, user_id, request.decision, request.confidence)
    return VerificationResponse.from_record(record)
