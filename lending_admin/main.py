from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from lending_admin.api.v1 import api_router
from lending_admin.core.errors import register_exception_handlers
from lending_admin.core.limiter import limiter
from lending_admin.core.logging import configure_logging
from lending_admin.core.response_envelope import register_response_envelope
from lending_admin.core.settings import settings
from lending_admin.events import register_event_handlers
from lending_admin.middlewares.request_context import RequestContextMiddleware
from lending_admin.services.mutations import MutationPipeline
from lending_admin.services.notifications import NotificationDeliverer, build_deliverer
from lending_admin.services.transitions import TransitionPolicy, build_policy


def create_app(
    *,
    deliverer: NotificationDeliverer | None = None,
    policy: TransitionPolicy | None = None,
) -> FastAPI:
    configure_logging()
    app = FastAPI(title="Lending Admin", version="0.1.0")
    app.state.pipeline = MutationPipeline(
        deliverer=deliverer or build_deliverer(),
        policy=policy or build_policy(),
    )
    register_exception_handlers(app)
    register_response_envelope(app)
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix="/api/v1")
    register_event_handlers(app)
    return app


app = create_app()
