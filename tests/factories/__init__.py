"""Helper factories for building payloads, snapshots and fake providers in tests."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from ratecache.providers.base import BaseRateProvider, ProviderError
from ratecache.providers.schemas import RateSnapshot


def make_snapshot(
    day: date = date(2024, 1, 15),
    base: str = "EUR",
    rates: Mapping[str, Decimal | str] | None = None,
    executed_at: datetime | None = None,
) -> RateSnapshot:
    """Return a snapshot with USD/GBP/CAD rates unless told otherwise."""

    if rates is None:
        rates = {"USD": "1.095183", "GBP": "0.86208", "CAD": "1.471164"}
    return RateSnapshot(
        date=day,
        base_currency=base,
        rates={code: Decimal(str(value)) for code, value in rates.items()},
        executed_at=executed_at,
    )


def make_fixer_payload(
    day: str = "2024-01-15",
    base: str = "EUR",
    rates: Mapping[str, float] | None = None,
    timestamp: int = 1705363199,
) -> dict[str, Any]:
    """Return an upstream success body."""

    return {
        "success": True,
        "historical": True,
        "date": day,
        "timestamp": timestamp,
        "base": base,
        "rates": dict(rates) if rates is not None else {"USD": 1.095183, "GBP": 0.86208},
    }


def make_fixer_error(code: int, error_type: str = "error", info: str | None = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "type": error_type}
    if info is not None:
        error["info"] = info
    return {"success": False, "error": error}


class RecordingProvider(BaseRateProvider):
    """Provider double that serves a fixed rate table and records each call."""

    name = "recording"

    def __init__(
        self,
        table: Mapping[str, Decimal | str] | None = None,
        error: ProviderError | None = None,
    ) -> None:
        table = table or {
            "USD": "1.095183",
            "GBP": "0.86208",
            "CAD": "1.471164",
            "JPY": "161.2511",
            "CHF": "0.9412",
        }
        self.table = {code: Decimal(str(value)) for code, value in table.items()}
        self.error = error
        self.calls: list[tuple[date, str, tuple[str, ...], str]] = []

    def fetch(self, day, base, symbols: Iterable[str], access_key: str) -> RateSnapshot:
        requested = tuple(symbols)
        self.calls.append((day, base, requested, access_key))
        if self.error is not None:
            raise self.error
        return RateSnapshot(
            date=day,
            base_currency=base,
            rates={code: self.table[code] for code in requested if code in self.table},
            executed_at=datetime(2024, 1, 16, 8, 30),
        )
