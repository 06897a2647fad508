"""Application-wide error utilities and handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.http import HTTP_STATUS_CODES

from ratecache.utils.datetime import utc_now

if TYPE_CHECKING:
    from ratecache.providers.base import ProviderError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for API-level errors."""

    status_code: int = 400
    error_code: str = "BAD_REQUEST"

    def __init__(
        self,
        message: str,
        *,
        description: str | None = None,
        status_code: int | None = None,
        error_code: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.description = description
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code


class ValidationError(APIError, ValueError):
    """Error raised for malformed input, detected before any I/O."""

    status_code = 400
    error_code = "INVALID_INPUT"


class MissingParameterError(ValidationError):
    """A required query parameter was not supplied."""

    error_code = "MISSING_PARAMETER"


class CacheEntryNotFoundError(APIError):
    status_code = 404
    error_code = "NOT_FOUND"


class UpstreamUnavailableError(APIError):
    status_code = 502
    error_code = "UPSTREAM_UNAVAILABLE"


DEFAULT_STATUS_MESSAGES: dict[int, str] = {
    400: "Request could not be processed.",
    404: "Resource not found.",
    429: "Too many requests. Please try again shortly.",
    500: "An unexpected error occurred",
    502: "Upstream provider unavailable.",
}


def error_body(
    *,
    status: int,
    error_code: str,
    message: str,
    description: str | None = None,
) -> dict[str, Any]:
    """Structured error payload shared by every handler."""

    body: dict[str, Any] = {
        "timestamp": utc_now().replace(microsecond=0).isoformat(),
        "status": status,
        "error": HTTP_STATUS_CODES.get(status, "Unknown Error"),
        "error_code": error_code,
        "message": message or DEFAULT_STATUS_MESSAGES.get(status, "Request failed."),
        "description": description,
        "path": request.path,
    }
    return {key: value for key, value in body.items() if value is not None}


def register_error_handlers(app: Flask) -> None:
    """Attach error handlers to the Flask application."""

    from ratecache.providers.base import ProviderError

    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):
        if error.status_code >= 500:
            logger.error("API error: %s - %s", error.error_code, error.message)
        else:
            logger.warning("Invalid request: %s - %s", error.error_code, error.message)
        body = error_body(
            status=error.status_code,
            error_code=error.error_code,
            message=error.message,
            description=error.description,
        )
        return jsonify(body), error.status_code

    @app.errorhandler(ProviderError)
    def handle_provider_error(error: ProviderError):
        mapped = provider_error_to_api_error(error)
        return handle_api_error(mapped)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        status = error.code or 500
        body = error_body(
            status=status,
            error_code="HTTP_ERROR",
            message=error.name,
            description=error.description,
        )
        return jsonify(body), status

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception("Unexpected error occurred")
        body = error_body(
            status=500,
            error_code="INTERNAL_ERROR",
            message=DEFAULT_STATUS_MESSAGES[500],
            description=str(error),
        )
        return jsonify(body), 500


def provider_error_to_api_error(error: ProviderError) -> APIError:
    """Map provider failures onto the externally visible 502 family."""

    from ratecache.providers.base import ProviderRequestError, ProviderUnavailable

    if isinstance(error, ProviderUnavailable):
        detail = error.detail or str(error)
        return UpstreamUnavailableError(
            str(error),
            description=f"Upstream status: {error.status_code}. {detail}"
            if error.status_code is not None
            else detail,
        )
    if isinstance(error, ProviderRequestError):
        return UpstreamUnavailableError(
            str(error),
            error_code="UPSTREAM_REJECTED",
            description=error.info,
        )
    return UpstreamUnavailableError(str(error))
