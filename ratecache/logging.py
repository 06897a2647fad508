"""Logging setup, JSON formatter and structured `extra` builders."""

from __future__ import annotations

import json
import logging
import time
import uuid
from collections.abc import Iterable
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from flask import g, has_request_context, request
from werkzeug.exceptions import HTTPException

REQUEST_ID_HEADER = "X-Request-ID"

LOGGING_CONFIG_FLAG = "_logging_configured"
REQUEST_LOGGING_FLAG = "_request_logging_configured"

# Attributes every LogRecord carries; anything else arrived through `extra`.
RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}

NOISY_LOGGERS = ("werkzeug", "urllib3")


class JSONLogFormatter(logging.Formatter):
    """One JSON object per line, with `extra` fields merged at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info

        for key, value in record.__dict__.items():
            if key in RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = value

        return json.dumps(_json_safe(payload), separators=(",", ":"))


def setup_logging(app) -> None:
    """Install a single root handler according to the LOG_* settings."""

    if app.config.get(LOGGING_CONFIG_FLAG):
        return

    level = _resolve_level(app.config.get("LOG_LEVEL", "INFO"))
    handler = logging.StreamHandler()
    handler.setLevel(level)
    if _to_bool(app.config.get("LOG_JSON_ENABLED", False)):
        handler.setFormatter(JSONLogFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                app.config.get("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")
            )
        )

    root_logger = logging.getLogger()
    _replace_handlers(root_logger, [handler])
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        noisy.handlers = []
        noisy.setLevel(max(level, logging.WARNING))
    app.logger.handlers = []
    app.logger.setLevel(level)
    app.logger.propagate = True

    app.config[LOGGING_CONFIG_FLAG] = True


def init_request_logging(app) -> None:
    """Tag each request with a correlation id and log its outcome."""

    if app.config.get(REQUEST_LOGGING_FLAG):
        return

    @app.before_request
    def _start_request_logging():
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        g.request_start = time.perf_counter()
        g._request_logged = False

    @app.after_request
    def _log_request(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        app.logger.info(
            "Request handled",
            extra=_request_extra(event="request.completed", status=response.status_code),
        )
        g._request_logged = True
        return response

    @app.teardown_request
    def _log_teardown(exc: BaseException | None):
        if exc is None or getattr(g, "_request_logged", False):
            return
        status = exc.code if isinstance(exc, HTTPException) and exc.code else 500
        app.logger.error(
            "Request failed",
            extra=_request_extra(event="request.failed", status=status, error=str(exc)),
        )
        g._request_logged = True

    app.config[REQUEST_LOGGING_FLAG] = True


def _request_extra(*, event: str, status: int, error: str | None = None) -> dict[str, Any]:
    start = getattr(g, "request_start", None)
    duration_ms = (time.perf_counter() - start) * 1000 if isinstance(start, float) else None
    payload: dict[str, Any] = {
        "event": event,
        "route": request.url_rule.rule if request.url_rule else request.path,
        "method": request.method,
        "status": status,
        "duration_ms": round(duration_ms, 3) if duration_ms is not None else None,
        "request_id": getattr(g, "request_id", None),
        "path": request.path,
        "client_ip": request.remote_addr,
        "error": error,
    }
    return {key: value for key, value in payload.items() if value is not None}


def provider_log_extra(
    *,
    provider: str,
    day: str,
    base: str,
    mode: str,
    attempt: int,
    status: str,
    duration_ms: float | None = None,
    access_key: str | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    """`extra` payload describing one upstream attempt."""

    payload: dict[str, Any] = {
        "event": "provider.fetch",
        "provider": provider,
        "date": day,
        "base": base,
        "mode": mode,
        "attempt": attempt,
        "status": status,
        "duration_ms": round(duration_ms, 3) if duration_ms is not None else None,
        "access_key": mask_access_key(access_key) if access_key else None,
        "request_id": current_request_id(),
        "error": error,
    }
    return {key: value for key, value in payload.items() if value is not None}


def cache_log_extra(*, day: str, base: str, outcome: str, **fields: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "event": "cache.lookup",
        "date": day,
        "base": base,
        "outcome": outcome,
        "request_id": current_request_id(),
    }
    payload.update(fields)
    return {key: value for key, value in payload.items() if value is not None}


def mask_access_key(access_key: str | None) -> str:
    """Keep the first four characters of a key and hide the rest."""

    if not access_key:
        return "<none>"
    return f"{access_key[:4]}{'*' * max(len(access_key) - 4, 3)}"


def current_request_id() -> str | None:
    if not has_request_context():
        return None
    return getattr(g, "request_id", None)


def _json_safe(value: Any) -> Any:
    if isinstance(value, str | int | float | bool) or value is None:
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [_json_safe(item) for item in value]
    return str(value)


def _resolve_level(level_name: Any) -> int:
    if isinstance(level_name, int):
        return level_name
    if not level_name:
        return logging.INFO
    return getattr(logging, str(level_name).upper(), logging.INFO)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _replace_handlers(logger: logging.Logger, handlers: Iterable[logging.Handler]) -> None:
    for existing in logger.handlers[:]:
        logger.removeHandler(existing)
    for handler in handlers:
        logger.addHandler(handler)
