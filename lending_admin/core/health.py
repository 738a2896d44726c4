from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from sqlalchemy import text

from lending_admin.core.settings import settings
from lending_admin.db.session import engine
from lending_admin.utils.redis_client import get_redis_client

APP_VERSION = "0.1.0"

Check = Callable[[], Awaitable[dict[str, str]]]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _check_db() -> dict[str, str]:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # pragma: no cover - exercised in runtime
        return {"status": "error", "error": exc.__class__.__name__}
    return {"status": "ok"}


async def _check_redis() -> dict[str, str]:
    """Rate limits always live in Redis; the redis deliverer publishes through it too."""
    try:
        await get_redis_client().ping()
    except Exception as exc:  # pragma: no cover - exercised in runtime
        return {"status": "error", "error": exc.__class__.__name__}
    return {"status": "ok"}


def _pipeline_details(pipeline: Any) -> dict[str, str]:
    if pipeline is None:
        return {"status": "error", "error": "pipeline not configured"}
    return {
        "status": "ok",
        "transitionMode": pipeline.policy.mode,
        "deliverer": type(pipeline.deliverer).__name__,
    }


async def live_payload() -> dict[str, str]:
    return {"status": "ok", "timestamp": _now()}


async def ready_payload(pipeline: Any = None) -> dict[str, Any]:
    dependency_checks: dict[str, Check] = {"database": _check_db, "redis": _check_redis}
    checks: dict[str, dict[str, str]] = {"api": {"status": "ok", "version": APP_VERSION}}
    for name, run_check in dependency_checks.items():
        checks[name] = await run_check()
    checks["mutations"] = _pipeline_details(pipeline)

    ready = all(check["status"] == "ok" for check in checks.values())
    return {
        "status": "ok" if ready else "degraded",
        "ready": ready,
        "environment": settings.environment,
        "timestamp": _now(),
        "checks": checks,
    }
