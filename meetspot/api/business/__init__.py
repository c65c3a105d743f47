"""Business profile API routes."""
from fastapi import APIRouter

from meetspot.api.business import routes_business

router = APIRouter()

router.include_router(routes_business.router, prefix="/business", tags=["business"])
