"""Admin API routes."""
from fastapi import APIRouter

from meetspot.api.admin import routes_auth, routes_config, routes_moderation, routes_verifications

router = APIRouter()

router.include_router(routes_auth.router, prefix="/admin", tags=["admin-auth"])
router.include_router(routes_verifications.router, prefix="/admin/verifications", tags=["admin-verifications"])
router.include_router(routes_moderation.router, prefix="/admin", tags=["admin-moderation"])
router.include_router(routes_config.router, prefix="/admin", tags=["admin-config"])
