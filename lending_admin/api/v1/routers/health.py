from fastapi import APIRouter, Request

from lending_admin.core.health import live_payload, ready_payload
from lending_admin.core.limiter import limiter

router = APIRouter(tags=["health"])


@router.get("/health/live", summary="Process is up")
@limiter.exempt
async def health_live() -> dict:
    return await live_payload()


@router.get("/health/ready", summary="Database, Redis and the mutation pipeline are usable")
@limiter.exempt
async def health_ready(request: Request) -> dict:
    return await ready_payload(getattr(request.app.state, "pipeline", None))
