import logging
import re
import time
from uuid import uuid4

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from lending_admin.core import context

logger = logging.getLogger(__name__)

# Caller-supplied ids end up in every log line, so only plain tokens are echoed back
_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def resolve_request_id(raw: bytes) -> str:
    candidate = raw.decode("latin-1").strip()
    if _REQUEST_ID_PATTERN.fullmatch(candidate):
        return candidate
    return str(uuid4())


class RequestContextMiddleware:
    """Bind request id, method and path for log lines; log one access line per request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = resolve_request_id(headers.get(b"x-request-id", b""))

        context.clear_context()
        context.bind(request_id=request_id, method=scope.get("method", "-"), path=scope.get("path", "-"))
        started = time.perf_counter()
        status_code = 500

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers_list = list(message.get("headers", []))
                headers_list.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers_list
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            logger.info(
                "%s %s -> %s in %.1fms",
                scope.get("method", "-"),
                scope.get("path", "-"),
                status_code,
                (time.perf_counter() - started) * 1000,
            )
