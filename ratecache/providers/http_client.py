"""Thin HTTP wrapper that performs one request and classifies the outcome."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests
from requests import Response, Session
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import JSONDecodeError, RequestException, Timeout

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = 429


class HTTPClientError(RuntimeError):
    """Raised when a request fails at the transport or HTTP level."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload
        self.retryable = retryable


@dataclass(frozen=True)
class HTTPClientConfig:
    """Configuration for the shared HTTP client."""

    base_url: str
    connect_timeout: float = 10.0
    read_timeout: float = 30.0

    @property
    def timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


class HTTPClient:
    """Single-shot JSON GET client; retrying is left to the caller."""

    def __init__(
        self,
        config: HTTPClientConfig,
        session: Optional[Session] = None,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        url = self._build_url(path)
        logger.debug("GET %s", url)
        try:
            response = self._session.get(url, params=params, timeout=self._config.timeout)
        except (Timeout, RequestsConnectionError) as exc:
            raise HTTPClientError(f"Network error calling {url}: {exc}", retryable=True) from exc
        except RequestException as exc:
            raise HTTPClientError(f"Request to {url} failed: {exc}") from exc
        return self._handle_response(response)

    def _build_url(self, path: str) -> str:
        base = self._config.base_url.rstrip("/")
        suffix = path.lstrip("/")
        return f"{base}/{suffix}"

    @staticmethod
    def _handle_response(response: Response) -> Dict[str, Any]:
        status = response.status_code
        payload = _try_json(response)

        if status >= 500:
            raise HTTPClientError(
                f"Server error {status}", status_code=status, payload=payload, retryable=True
            )
        if status == TOO_MANY_REQUESTS:
            raise HTTPClientError(
                "Too many requests", status_code=status, payload=payload, retryable=True
            )
        if status >= 400:
            raise HTTPClientError(
                f"Client error {status}: {response.text}", status_code=status, payload=payload
            )

        if payload is None:
            raise HTTPClientError("Invalid JSON response", status_code=status)
        return payload


def _try_json(response: Response) -> Optional[Dict[str, Any]]:
    try:
        payload = response.json()
    except (JSONDecodeError, ValueError):
        return None
    return payload if isinstance(payload, dict) else None
