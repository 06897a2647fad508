"""Dataclasses describing cached snapshots and upstream payloads."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Mapping

from ratecache.utils.datetime import ensure_utc


def _normalize_code(code: str) -> str:
    normalized = str(code).strip().upper()
    if not normalized.isascii():
        raise ValueError(f"Currency code must be ASCII: {code!r}")
    return normalized


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """Convert an upstream number to Decimal without binary float noise."""

    if isinstance(value, bool):
        raise ValueError(f"Rate must be numeric, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # str() yields the shortest repr of a float, i.e. the literal sent on the wire.
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Rate must be numeric, got {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Rate must be a finite number, got {value!r}")
    return result


def _normalize_rates(rates: Mapping[str, Decimal | float | int | str]) -> Dict[str, Decimal]:
    normalized: Dict[str, Decimal] = {}
    for code, value in rates.items():
        normalized[_normalize_code(code)] = to_decimal(value)
    return normalized


@dataclass(frozen=True)
class RateSnapshot:
    """Rates for one calendar day against one base currency."""

    date: date
    base_currency: str
    rates: Dict[str, Decimal] = field(default_factory=dict)
    executed_at: datetime | None = None

    def __post_init__(self) -> None:
        if isinstance(self.date, datetime) or not isinstance(self.date, date):
            raise ValueError("date must be a calendar date without time component")
        object.__setattr__(self, "base_currency", _normalize_code(self.base_currency))
        object.__setattr__(self, "rates", _normalize_rates(self.rates))
        if self.executed_at is not None:
            object.__setattr__(self, "executed_at", ensure_utc(self.executed_at))
        for code, rate in self.rates.items():
            if rate <= 0:
                raise ValueError(f"Rate for {code} must be positive, got {rate}")

    @property
    def key(self) -> tuple[date, str]:
        return (self.date, self.base_currency)

    @property
    def symbols(self) -> frozenset[str]:
        return frozenset(self.rates)

    def subset(self, symbols: Iterable[str]) -> RateSnapshot:
        """Return a copy holding only the requested symbols that are present."""

        wanted = [_normalize_code(code) for code in symbols]
        rates = {code: self.rates[code] for code in wanted if code in self.rates}
        return replace(self, rates=rates)

    def merged_with(self, other: RateSnapshot) -> RateSnapshot:
        """Add ``other``'s entries on top of ours; ``other`` wins on overlap."""

        if other.key != self.key:
            raise ValueError(
                f"Cannot merge snapshot {other.key} into {self.key}: keys differ"
            )
        rates = dict(self.rates)
        rates.update(other.rates)
        executed_at = other.executed_at or self.executed_at
        return replace(self, rates=rates, executed_at=executed_at)


@dataclass(frozen=True)
class FixerErrorDetail:
    """The ``error`` object of an unsuccessful upstream payload."""

    code: int
    type: str = ""
    info: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> FixerErrorDetail:
        raw = payload.get("error") or {}
        if not isinstance(raw, Mapping):
            return cls(code=0, type="unknown_error", info=str(raw))
        try:
            code = int(raw.get("code") or 0)
        except (TypeError, ValueError):
            code = 0
        return cls(code=code, type=str(raw.get("type") or ""), info=raw.get("info"))


@dataclass(frozen=True)
class FixerResponse:
    """Successful upstream payload, with rates already converted to Decimal."""

    success: bool
    date: str | None
    base: str | None
    rates: Dict[str, Decimal] = field(default_factory=dict)
    historical: bool = False
    timestamp: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", _normalize_rates(self.rates or {}))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> FixerResponse:
        rates = payload.get("rates") or {}
        if not isinstance(rates, Mapping):
            raise ValueError("'rates' must be an object mapping currency codes to numbers")
        timestamp = payload.get("timestamp")
        return cls(
            success=bool(payload.get("success", False)),
            historical=bool(payload.get("historical", False)),
            date=payload.get("date"),
            timestamp=int(timestamp) if timestamp is not None else None,
            base=payload.get("base"),
            rates={code: value for code, value in rates.items() if value is not None},
        )
