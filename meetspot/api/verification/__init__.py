"""Verification API routes."""
from fastapi import APIRouter

from meetspot.api.verification import routes_verification

router = APIRouter()

router.include_router(routes_verification.router, prefix="/verification", tags=["verification"])
