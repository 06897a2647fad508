from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Dict, Optional

from ratecache.logging import mask_access_key
from ratecache.providers.http_client import HTTPClient, HTTPClientConfig, HTTPClientError

from .schemas import FixerErrorDetail, FixerResponse

logger = logging.getLogger(__name__)


class FixerAPIError(RuntimeError):
    """Raised when the Fixer API call fails or returns an error payload."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error: Optional[FixerErrorDetail] = None,
        network_error: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.network_error = network_error

    @property
    def error_code(self) -> Optional[int]:
        return self.error.code if self.error is not None else None


class FixerClientConfig:
    """Configuration parameters for the Fixer client."""

    def __init__(
        self,
        base_url: str,
        connect_timeout: float = 10.0,
        read_timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout


class FixerClient:
    """HTTP client for the Fixer historical-rates endpoint."""

    def __init__(self, config: FixerClientConfig, client: Optional[HTTPClient] = None) -> None:
        self._config = config
        self._client = client or HTTPClient(
            HTTPClientConfig(
                base_url=config.base_url,
                connect_timeout=config.connect_timeout,
                read_timeout=config.read_timeout,
            )
        )

    def get_historical(
        self,
        day: str,
        access_key: str,
        *,
        base: Optional[str] = None,
        symbols: Optional[Iterable[str]] = None,
    ) -> FixerResponse:
        """Call ``GET /{day}``; ``base`` is left out entirely when None."""

        params: Dict[str, Any] = {"access_key": access_key}
        if base:
            params["base"] = base
        symbol_list = list(symbols or ())
        if symbol_list:
            params["symbols"] = ",".join(symbol_list)

        logger.debug(
            "Requesting Fixer rates for %s (key=%s, base=%s, symbols=%s)",
            day,
            mask_access_key(access_key),
            base or "<provider default>",
            params.get("symbols", "<all>"),
        )

        try:
            payload = self._client.get(f"/{day}", params=params)
        except HTTPClientError as exc:
            message = _scrub(str(exc), access_key)
            error = FixerErrorDetail.from_payload(exc.payload) if exc.payload else None
            raise FixerAPIError(
                message,
                status_code=exc.status_code,
                error=error if error and error.code else None,
                network_error=exc.retryable and exc.status_code is None,
            ) from exc

        if not payload.get("success", False):
            error = FixerErrorDetail.from_payload(payload)
            logger.error(
                "Fixer API error - code: %s, type: %s, info: %s",
                error.code,
                error.type,
                error.info,
            )
            raise FixerAPIError(
                f"Fixer API error {error.code} ({error.type or 'unknown'})",
                status_code=200,
                error=error,
            )

        try:
            return FixerResponse.from_payload(payload)
        except ValueError as exc:
            raise FixerAPIError(f"Unexpected response payload from Fixer: {exc}", status_code=200) from exc


def _scrub(message: str, access_key: str) -> str:
    # Transport errors echo the full URL, query string included.
    if access_key and access_key in message:
        return message.replace(access_key, mask_access_key(access_key))
    return message
