"""Report API routes."""
from fastapi import APIRouter

from meetspot.api.reports import routes_reports

router = APIRouter()

router.include_router(routes_reports.router, prefix="/reports", tags=["reports"])
