"""
Structured logging for the query gateway.

Every event passes through structlog processors that attach the current
request ID and redact sensitive keys before rendering, either as one JSON
object per line or as colored console output for local runs.
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import structlog
from structlog.stdlib import LoggerFactory

REDACTED = "[REDACTED]"

DEFAULT_SENSITIVE_FIELDS = (
    "authorization", "cookie", "password", "token", "secret", "api_key",
)

# Set by the request middleware for the lifetime of one request
request_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


class RequestIDProcessor:
    """Adds ``request_id`` to events logged while a request is in flight."""

    def __call__(self, logger, method_name, event_dict):
        current = request_id.get()
        if current is not None:
            event_dict.setdefault("request_id", current)
        return event_dict


class SecurityProcessor:
    """Replaces the value of any key containing a sensitive word.

    Nested mappings and sequences are walked, so header dicts logged as a
    single field are redacted too.
    """

    def __init__(self, fields: Optional[Iterable[str]] = None):
        self.fields = tuple(f.lower() for f in (fields or DEFAULT_SENSITIVE_FIELDS))

    def __call__(self, logger, method_name, event_dict):
        return self._redact(event_dict)

    def _is_sensitive(self, key: Any) -> bool:
        name = str(key).lower()
        return any(field in name for field in self.fields)

    def _redact(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                key: REDACTED if self._is_sensitive(key) else self._redact(item)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [self._redact(item) for item in value]
        return value


class JSONRenderer:
    """Renders an event as a compact JSON line with an upper-case level."""

    def __call__(self, logger, name, event_dict):
        event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        level = event_dict.get("level")
        if level:
            event_dict["level"] = level.upper()
        return json.dumps(event_dict, default=str, separators=(",", ":"))


def setup_logging(
    service_name: str,
    level: str = "INFO",
    format_type: str = "json",
    logger_levels: Optional[dict] = None,
    sensitive_fields: Optional[Iterable[str]] = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        service_name: Bound to every event as ``service``
        level: Minimum level for gateway events
        format_type: ``json`` or ``console``
        logger_levels: Level overrides for stdlib loggers, keyed by logger name
        sensitive_fields: Key fragments whose values are redacted
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    renderer = JSONRenderer() if format_type == "json" else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            RequestIDProcessor(),
            SecurityProcessor(sensitive_fields),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Rendered events reach stdout through the root logger
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name, override in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(override.upper())

    structlog.contextvars.bind_contextvars(service=service_name)


def set_request_id(req_id: Optional[str]) -> contextvars.Token:
    """Make ``req_id`` the current request ID; returns a token for ``reset_request_id``."""
    return request_id.set(req_id)


def reset_request_id(token: contextvars.Token) -> None:
    request_id.reset(token)
