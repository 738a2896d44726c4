import logging

from fastapi import FastAPI

from lending_admin.db.session import engine
from lending_admin.utils.redis_client import close_redis_client

logger = logging.getLogger(__name__)


def register_event_handlers(app: FastAPI) -> None:
    @app.on_event("startup")
    async def on_startup() -> None:
        pipeline = app.state.pipeline
        logger.info(
            "Application startup (transition_mode=%s, deliverer=%s)",
            pipeline.policy.mode,
            type(pipeline.deliverer).__name__,
        )

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        logger.info("Application shutdown")
        await close_redis_client()
        await engine.dispose()
