"""Main FastAPI application."""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from meetspot.api.activity import router as activity_router
from meetspot.api.admin import router as admin_router
from meetspot.api.business import router as business_router
from meetspot.api.friends import router as friends_router
from meetspot.api.reports import router as reports_router
from meetspot.api.verification import router as verification_router
from meetspot.domain.common.errors import (
    AccessDeniedError,
    CapacityExceededError,
    ConflictError,
    DomainError,
    InvalidOperationError,
    InvalidStateError,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from meetspot.infra.db import models  # noqa: F401  registers tables on Base.metadata
from meetspot.infra.db.base import Base, dispose_engine, get_engine
from meetspot.infra.messaging.redis_bus import redis_bus
from meetspot.settings import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    try:
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        # Database might not be ready yet; /ready reports it
        logger.warning("Could not create tables during startup: %s", e)

    if settings.notification_backend == "redis":
        try:
            await redis_bus.connect()
        except Exception as e:
            logger.warning("Could not connect to Redis during startup: %s", e)

    yield

    await redis_bus.disconnect()
    await dispose_engine()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        logger.info("[REQUEST] %s %s", request.method, request.url.path)

        if logger.isEnabledFor(logging.DEBUG):
            headers = dict(request.headers)
            auth_header = headers.get("authorization", "")
            if auth_header.startswith("Bearer "):
                token = auth_header[7:]
                headers["authorization"] = f"Bearer {token[:12]}..." if len(token) > 12 else "Bearer ***"
            logger.debug("   Query params: %s", dict(request.query_params))
            logger.debug("   Headers: %s", headers)

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            "[RESPONSE] %s %s - %s (%.3fs)",
            request.method, request.url.path, response.status_code, process_time,
        )
        return response


app.add_middleware(LoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log request validation errors before returning them."""
    errors = exc.errors()
    logger.warning(
        "[VALIDATION ERROR] %s %s: %s error(s)", request.method, request.url.path, len(errors)
    )
    for error in errors:
        logger.debug("   %s", error)
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


# Domain error handlers: map domain exceptions to HTTP status
_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (ValidationError, 422),
    (NotAuthorizedError, 403),
    (InvalidStateError, 409),
    (InvalidOperationError, 400),
    (CapacityExceededError, 409),
    (ConflictError, 409),
)


def _message(exc: DomainError) -> str:
    return exc.message if hasattr(exc, "message") else str(exc)


def _make_handler(status_code: int):
    async def handler(request: Request, exc: DomainError):
        return JSONResponse(status_code=status_code, content={"detail": _message(exc)})
    return handler


for _error_cls, _status_code in _STATUS_BY_ERROR:
    app.add_exception_handler(_error_cls, _make_handler(_status_code))


@app.exception_handler(AccessDeniedError)
async def access_denied_handler(request: Request, exc: AccessDeniedError):
    """Return 403 with the machine-readable reason so clients can prompt for what is missing."""
    return JSONResponse(
        status_code=403,
        content={"detail": exc.message, "reason": exc.reason},
    )


@app.get("/health")
@app.get(f"{settings.api_v1_prefix}/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": settings.app_version}


@app.get("/ready")
async def readiness():
    """Readiness endpoint: 200 if ready, 503 otherwise."""
    from meetspot.readiness import is_ready, run_all_checks_async
    checks = await run_all_checks_async()
    ready, summary = is_ready(checks)
    if ready:
        return {"ready": True, "checks": summary}
    return JSONResponse(status_code=503, content={"ready": False, "checks": summary})


# API v1 routes
app.include_router(friends_router, prefix=settings.api_v1_prefix)
app.include_router(activity_router, prefix=settings.api_v1_prefix)
app.include_router(verification_router, prefix=settings.api_v1_prefix)
app.include_router(reports_router, prefix=settings.api_v1_prefix)
app.include_router(business_router, prefix=settings.api_v1_prefix)
app.include_router(admin_router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("meetspot.main:app", host="0.0.0.0", port=8000, reload=True)
