from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Iterable

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = "You do not have permission to perform this action"
RETRYABLE_FAILURE_MESSAGE = "The change could not be saved. No changes were applied; please retry."


class MutationError(Exception):
    """Base class for every failure an admin mutation can surface."""

    status_code: int = 500
    code: str = "unexpected_error"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, errors: Iterable[str] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)


class UnauthenticatedError(MutationError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Authentication required"


class ForbiddenError(MutationError):
    status_code = 403
    code = "forbidden"
    default_message = PERMISSION_DENIED_MESSAGE


class MutationValidationError(MutationError):
    status_code = 400
    code = "validation_error"
    default_message = "Validation failed"

    @classmethod
    def from_errors(cls, errors: Iterable[str]) -> "MutationValidationError":
        collected = list(errors)
        # A lone error doubles as the headline message
        message = collected[0] if len(collected) == 1 else cls.default_message
        return cls(message, errors=collected)


class NotFoundError(MutationError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class ConflictError(MutationError):
    status_code = 409
    code = "conflict"
    default_message = "The record was modified by another request. Reload it and try again."


class TransactionalError(MutationError):
    status_code = 500
    code = "transactional_error"
    default_message = RETRYABLE_FAILURE_MESSAGE


class UnexpectedError(MutationError):
    status_code = 500
    code = "unexpected_error"
    default_message = RETRYABLE_FAILURE_MESSAGE


def _default_code(status_code: int) -> str:
    mapping = {
        400: "bad_request",
        401: "unauthenticated",
        403: "forbidden",
        404: "not_found",
        409: "conflict",
        422: "unprocessable_entity",
        429: "rate_limited",
    }
    return mapping.get(status_code, "http_error")


def _default_message(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Request failed"


def _build_response(
    status_code: int,
    code: str,
    message: str,
    errors: list[str] | None = None,
    details: Any | None = None,
) -> JSONResponse:
    payload: dict[str, Any] = {
        "success": False,
        "code": code,
        "message": message,
    }
    if errors:
        payload["errors"] = errors
    if details:
        payload["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def _format_validation_error(error: dict) -> str:
    loc = error.get("loc") or []
    msg = error.get("msg") or "Invalid value"
    # Drop the request section (body/query/path) from the location
    loc_parts = [str(part) for part in loc if part not in {"body", "query", "path"}]
    if loc_parts:
        return f"{'.'.join(loc_parts)}: {msg}"
    return str(msg)


async def mutation_error_handler(request: Request, exc: MutationError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Mutation failed with %s: %s", exc.code, exc.__cause__ or exc)
    return _build_response(exc.status_code, exc.code, exc.message, errors=exc.errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    message = detail if isinstance(detail, str) else _default_message(exc.status_code)
    return _build_response(exc.status_code, _default_code(exc.status_code), message)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        return _build_response(400, "invalid_body", "Invalid request body")
    return _build_response(
        status_code=400,
        code="validation_error",
        message="Validation failed",
        errors=[_format_validation_error(error) for error in errors],
    )


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    response = _build_response(
        status_code=429,
        code="rate_limited",
        message=_default_message(429),
        details=getattr(exc, "detail", None),
    )
    headers = getattr(exc, "headers", None)
    if isinstance(headers, dict):
        response.headers.update(headers)
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _build_response(
        status_code=500,
        code="internal_server_error",
        message="Internal server error",
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(MutationError, mutation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
