"""Activity API routes."""
from fastapi import APIRouter

from meetspot.api.activity import routes_activity

router = APIRouter()

router.include_router(routes_activity.router, prefix="/activities", tags=["activities"])
