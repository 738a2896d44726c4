"""Per-request values that log records pick up through ``RequestContextFilter``."""

import contextvars
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class LogContext:
    request_id: str = "-"
    actor_id: str = "-"
    method: str = "-"
    path: str = "-"


_EMPTY = LogContext()
_current: contextvars.ContextVar[LogContext] = contextvars.ContextVar("log_context", default=_EMPTY)


def current() -> LogContext:
    return _current.get()


def bind(**values: str) -> LogContext:
    """Overlay ``values`` on the current context and return the result."""
    updated = replace(_current.get(), **values)
    _current.set(updated)
    return updated


def set_actor_id(actor_id: str) -> None:
    bind(actor_id=actor_id)


def get_actor_id() -> str:
    return _current.get().actor_id


def set_request_id(request_id: str) -> None:
    bind(request_id=request_id)


def get_request_id() -> str:
    return _current.get().request_id


def clear_context() -> None:
    _current.set(_EMPTY)
