import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Optional

from lending_admin.core import context
from lending_admin.core.settings import settings

AUDIT_LOGGER_NAME = "lending_admin.audit"


class RequestContextFilter(logging.Filter):
    """Copy the bound request context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        bound = context.current()
        record.actor_id = bound.actor_id
        record.request_id = bound.request_id
        record.http_method = bound.method
        record.http_path = bound.path
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; audit records carry their ``event`` payload."""

    def __init__(self, stream_label: str = "transactional") -> None:
        super().__init__()
        self.stream_label = stream_label

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "stream": self.stream_label,
            "actor_id": getattr(record, "actor_id", "-"),
            "request_id": getattr(record, "request_id", "-"),
        }
        method = getattr(record, "http_method", "-")
        if method != "-":
            payload["http"] = {"method": method, "path": getattr(record, "http_path", "-")}
        event = getattr(record, "event", None)
        if isinstance(event, dict):
            payload["event"] = event
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class PlainFormatter(logging.Formatter):
    """Human-readable lines for local runs."""

    def __init__(self, stream_label: str = "transactional") -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s [%(request_id)s actor=%(actor_id)s] %(name)s: %(message)s"
        )
        self.stream_label = stream_label

    def format(self, record: logging.LogRecord) -> str:
        for name in ("request_id", "actor_id"):
            if not hasattr(record, name):
                setattr(record, name, "-")
        line = super().format(record)
        event = getattr(record, "event", None)
        if self.stream_label == "audit" and isinstance(event, dict):
            line = f"{line} {json.dumps(event, default=str, sort_keys=True)}"
        return line


_FORMATTERS = {"json": JsonFormatter, "plain": PlainFormatter}


def _handler(formatter: str, level: str) -> dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "level": level,
        "formatter": formatter,
        "filters": ["request_context"],
        "stream": "ext://sys.stdout",
    }


def build_logging_config(level: str, log_format: str) -> dict[str, Any]:
    formatter_class = _FORMATTERS[log_format]
    routed = {"handlers": ["default"], "level": level, "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_context": {"()": RequestContextFilter}},
        "formatters": {
            "default": {"()": formatter_class, "stream_label": "transactional"},
            "audit": {"()": formatter_class, "stream_label": "audit"},
        },
        "handlers": {
            "default": _handler("default", level),
            "audit": _handler("audit", level),
        },
        "loggers": {
            "": dict(routed),
            AUDIT_LOGGER_NAME: {"handlers": ["audit"], "level": level, "propagate": False},
            # the request middleware already writes an access line
            "uvicorn.access": {"handlers": [], "level": "WARNING", "propagate": False},
            "uvicorn": dict(routed),
            "uvicorn.error": dict(routed),
        },
    }


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    log_level = (level or settings.log_level).upper()
    logging.config.dictConfig(build_logging_config(log_level, log_format or settings.log_format))
    logging.getLogger(__name__).info(
        "Logging configured for environment=%s format=%s transition_mode=%s",
        settings.environment,
        log_format or settings.log_format,
        settings.status_transition_mode,
    )


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(AUDIT_LOGGER_NAME)
