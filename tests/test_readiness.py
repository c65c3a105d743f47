"""Readiness checks."""
import pytest

from meetspot.readiness import (
    check_config,
    check_database,
    check_packages,
    check_redis,
    is_ready,
    run_all_checks_async,
)


def test_core_checks_pass():
    assert check_config() == (True, "ok")
    assert check_packages() == (True, "ok")


def test_redis_skipped_with_log_backend():
    passed, message = check_redis()
    assert passed
    assert message.startswith("skipped")


async def test_unusable_database_url_fails():
    passed, message = await check_database("not-a-database-url")
    assert not passed
    assert message


def test_is_ready_requires_database():
    checks = {
        "config": (True, "ok"),
        "packages": (True, "ok"),
        "database": (False, "connection refused"),
        "redis": (True, "skipped (not configured)"),
    }
    ready, summary = is_ready(checks)
    assert not ready
    assert summary["database"] == "connection refused"


def test_is_ready_ignores_skipped_redis():
    checks = {
        "config": (True, "ok"),
        "packages": (True, "ok"),
        "database": (True, "ok"),
        "redis": (True, "skipped (not configured)"),
    }
    assert is_ready(checks)[0]


def test_is_ready_requires_configured_redis():
    checks = {
        "config": (True, "ok"),
        "packages": (True, "ok"),
        "database": (True, "ok"),
        "redis": (False, "Error 111 connecting to localhost:6379"),
    }
    assert not is_ready(checks)[0]


@pytest.mark.integration
async def test_readiness_all_checks_pass():
    """Config and packages must pass; the database may be unavailable (e.g. in CI)."""
    checks = await run_all_checks_async()
    for name in ("config", "packages"):
        ok, msg = checks.get(name, (False, "missing"))
        assert ok, f"readiness {name}: {msg}"
    ready, summary = is_ready(checks)
    if not ready:
        failed_core = [n for n in ("config", "packages") if not checks[n][0]]
        if failed_core:
            report = "\n".join(f"  {name}: {msg}" for name, msg in summary.items())
            pytest.fail(f"Readiness checks failed:\n{report}")
