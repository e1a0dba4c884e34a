from __future__ import annotations

import contextvars
import json
import logging
import os
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

ROOT_LOGGER = "expense_tracker"
REQUEST_ID_HEADER = "x-request-id"

# Every log line carries whichever of these are set in the current context.
_CONTEXT: dict[str, contextvars.ContextVar[str | None]] = {
    "request_id": contextvars.ContextVar("request_id", default=None),
    "user_id": contextvars.ContextVar("user_id", default=None),
    "parse_session": contextvars.ContextVar("parse_session", default=None),
}

_configured = False


class JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, event name and flattened fields."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds")
        payload: dict[str, Any] = {
            "ts": ts.replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", None) or record.getMessage(),
        }
        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            payload.update({k: v for k, v in fields.items() if v is not None})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=True)


def configure_logging() -> None:
    global _configured  # noqa: PLW0603
    if _configured:
        return
    level = logging.getLevelNamesMapping().get(
        os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO
    )
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.handlers = [handler]
    root.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)


def set_user_context(user_id: str | None) -> None:
    _CONTEXT["user_id"].set(user_id)


@contextmanager
def bind_parse_session(session_key: str) -> Iterator[None]:
    """Tag log lines (including those of tasks started inside) with the parse session."""
    token = _CONTEXT["parse_session"].set(session_key)
    try:
        yield
    finally:
        _CONTEXT["parse_session"].reset(token)


def _merge_fields(fields: dict[str, Any]) -> dict[str, Any]:
    payload = {name: var.get() for name, var in _CONTEXT.items() if var.get()}
    payload.update({k: v for k, v in fields.items() if v is not None})
    return payload


def log_event(
    logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields: Any
) -> None:
    logger.log(level, event, extra={"event": event, "fields": _merge_fields(fields)})


def log_exception(logger: logging.Logger, event: str, **fields: Any) -> None:
    logger.exception(event, extra={"event": event, "fields": _merge_fields(fields)})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request id, echo it back in ``x-request-id`` and log each request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        logger = get_logger(__name__)
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        tokens = [
            (var, var.set(value))
            for var, value in ((_CONTEXT["request_id"], request_id), (_CONTEXT["user_id"], None))
        ]
        start = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            log_exception(
                logger,
                "http.request.error",
                method=request.method,
                path=request.url.path,
                duration_ms=monotonic_ms(start),
            )
            raise
        else:
            response.headers[REQUEST_ID_HEADER] = request_id
            log_event(
                logger,
                "http.request.finish",
                level=logging.WARNING if response.status_code >= 500 else logging.INFO,
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=monotonic_ms(start),
            )
            return response
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


def monotonic_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
