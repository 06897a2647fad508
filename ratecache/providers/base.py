"""Abstract interface and error hierarchy for the upstream rate provider."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date

from .schemas import RateSnapshot


class ProviderError(Exception):
    """Raised when the upstream provider cannot fulfill a request."""


class ProviderRequestError(ProviderError):
    """Non-retryable rejection from the provider (bad key, bad symbols, ...)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_code: int | None = None,
        info: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.info = info


class ProviderUnavailable(ProviderError):
    """Raised once retries (and the restricted-mode fallback) are exhausted."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: str | None = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
        self.attempts = attempts


class BaseRateProvider(ABC):
    """Defines the interface a rate provider must implement."""

    name: str

    @abstractmethod
    def fetch(
        self,
        day: date | str,
        base: str,
        symbols: Iterable[str],
        access_key: str,
    ) -> RateSnapshot:
        """Retrieve `symbols` quoted against `base` for the given day."""
