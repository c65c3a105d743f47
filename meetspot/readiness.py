"""Readiness checks: config, packages, database, redis."""
import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from meetspot.infra.db.base import (
    async_pg_connect_args,
    async_pg_url_without_sslmode,
    normalize_async_pg_url,
)

logger = logging.getLogger(__name__)

# Result: (passed: bool, message: str)
CheckResult = tuple[bool, str]
ChecksDict = dict[str, CheckResult]


def check_config() -> CheckResult:
    """Load settings and read the keys every request depends on."""
    try:
        from meetspot.settings import get_settings
        s = get_settings()
        _ = s.app_name
        _ = s.database_url
        _ = s.secret_key
        return True, "ok"
    except Exception as e:
        return False, str(e)


def check_packages() -> CheckResult:
    """Import critical modules: uvicorn, sqlalchemy, redis, jose."""
    missing = []
    for name in ("uvicorn", "sqlalchemy", "redis", "jose"):
        try:
            __import__(name)
        except ImportError:
            missing.append(name)
    if missing:
        return False, f"missing: {', '.join(missing)}"
    return True, "ok"


async def check_database(database_url: Optional[str] = None) -> CheckResult:
    """Run a trivial query against the database."""
    try:
        if database_url is None:
            from meetspot.settings import get_settings
            database_url = get_settings().database_url
        url = normalize_async_pg_url(database_url)
        engine = create_async_engine(
            async_pg_url_without_sslmode(url),
            connect_args=async_pg_connect_args(url),
            pool_pre_ping=True,
        )
        try:
            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
        finally:
            await engine.dispose()
        return True, "ok"
    except Exception as e:
        return False, str(e)


def check_redis() -> CheckResult:
    """Ping Redis when it is the notification backend; skipped otherwise."""
    try:
        from meetspot.settings import get_settings
        s = get_settings()
        if s.notification_backend != "redis":
            return True, "skipped (not configured)"
        import redis as redis_lib
        client = redis_lib.from_url(s.redis_url)
        try:
            client.ping()
        finally:
            client.close()
        return True, "ok"
    except Exception as e:
        return False, str(e)


async def run_all_checks_async() -> ChecksDict:
    """Run all readiness checks. Returns dict of check_name -> (passed, message)."""
    return {
        "config": check_config(),
        "packages": check_packages(),
        "database": await check_database(),
        "redis": check_redis(),
    }


def is_ready(checks: ChecksDict) -> tuple[bool, dict[str, str]]:
    """True if all required checks pass.

    Returns (ready, summary of name -> "ok" | "skipped ..." | error message).
    """
    required = {"config", "packages", "database"}
    summary = {name: msg for name, (_passed, msg) in checks.items()}
    redis_required = not checks.get("redis", (True, ""))[1].startswith("skipped")
    if redis_required:
        required.add("redis")
    ready = all(checks[n][0] for n in required if n in checks)
    if not ready:
        logger.warning("Readiness failed: %s", summary)
    return ready, summary
