"""User-facing verification routes."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from meetspot.api.deps import get_current_caller, get_verification_service
from meetspot.api.verification.schemas import VerificationResponse
from meetspot.domain.common.types import Caller
from meetspot.domain.verification.services import VerificationService

router = APIRouter()


class AgeRequest(BaseModel):
    birth_date: date


class IdDocumentRequest(BaseModel):
    """Reference returned by the blob store for the uploaded document."""
    image_ref: Optional[str] = None


class FaceRequest(BaseModel):
    image_ref: Optional[str] = None
    confidence: Optional[float] = None


class SocialRequest(BaseModel):
    """Outcome of an OTP or OAuth exchange completed upstream."""
    platform: str
    status: str = "verified"
    identifier: Optional[str] = None


@router.get("/me", response_model=VerificationResponse)
async def get_my_verification(
    caller: Caller = Depends(get_current_caller),
    service: VerificationService = Depends(get_verification_service),
):
    return VerificationResponse.from_record(await service.get_record(caller.user_id))


@router.post("/age", response_model=VerificationResponse)
async def submit_age(
    request: AgeRequest,
    caller: Caller = Depends(get_current_caller),
    service: VerificationService = Depends(get_verification_service),
):
    record = await service.submit_age(caller.user_id, request.birth_date)
    return VerificationResponse.from_record(record)


@router.post("/id", response_model=VerificationResponse)
async def submit_id_document(
    request: IdDocumentRequest,
    caller: Caller = Depends(get_current_caller),
    service: VerificationService = Depends(get_verification_service),
):
    record = await service.submit_id_document(caller.user_id, request.image_ref)
    return VerificationResponse.from_record(record)


@router.post("/face", response_model=VerificationResponse)
async def submit_face(
    request: FaceRequest,
    caller: Caller = Depends(get_current_caller),
    service: VerificationService = Depends(get_verification_service),
):
    record = await service.submit_face(caller.user_id, request.image_ref, request.confidence)
    return VerificationResponse.from_record(record)


@router.post("/social", response_model=VerificationResponse)
async def record_social_verification(
    request: SocialRequest,
    caller: Caller = Depends(get_current_caller),
    service: VerificationService = Depends(get_verification_service),
):
    record = await service.record_social_verification(
        caller.user_id, request.platform, status=request.status, identifier=request.identifier
    )
    return VerificationResponse.from_record(record)
