"""Translate between cached snapshots and the upstream response shape.

The service answers in exactly the JSON contract the upstream provider uses,
so callers can switch between the two without changes. The same mapping is
used in reverse to turn a fresh upstream response into a snapshot that can be
cached.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict

from ratecache.utils.datetime import to_unix_seconds, utc_now

from .schemas import FixerResponse, RateSnapshot

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


class AssemblyError(ValueError):
    """Raised when a payload or snapshot cannot be mapped."""


def snapshot_from_response(
    response: FixerResponse | None,
    executed_at: datetime | None = None,
) -> RateSnapshot:
    """Build a cacheable snapshot from a successful upstream response.

    Entries with an empty currency code or a rate that is not strictly
    positive are skipped rather than failing the whole response.

    Raises:
        AssemblyError: If the response is missing, unsuccessful, or lacks a
            usable date or base currency.
    """

    if response is None:
        raise AssemblyError("Response cannot be None")
    if not response.success:
        raise AssemblyError("Response indicates failure - cannot convert")
    if not response.date:
        raise AssemblyError("Response date cannot be null or empty")
    if not response.base or not str(response.base).strip():
        raise AssemblyError("Response base currency cannot be null or empty")

    rate_date = parse_date(response.date)

    rates: Dict[str, Decimal] = {}
    for code, rate in response.rates.items():
        if not code or rate is None or rate <= 0:
            logger.warning("Skipping invalid rate entry: currency=%s, rate=%s", code, rate)
            continue
        rates[code] = rate

    if not rates:
        logger.warning("Response for %s/%s contains no rates data", response.date, response.base)

    return RateSnapshot(
        date=rate_date,
        base_currency=response.base,
        rates=rates,
        executed_at=executed_at,
    )


def response_from_snapshot(
    snapshot: RateSnapshot | None,
    timestamp: datetime | None = None,
) -> FixerResponse:
    """Render a cached snapshot in the upstream success shape.

    The unix ``timestamp`` is the explicit value if given, otherwise the time
    the snapshot was fetched, otherwise now.
    """

    if snapshot is None:
        raise AssemblyError("Snapshot cannot be None")
    if getattr(snapshot, "date", None) is None:
        raise AssemblyError("Snapshot date cannot be null")
    if not snapshot.base_currency:
        raise AssemblyError("Snapshot base currency cannot be null or empty")

    moment = timestamp or snapshot.executed_at or utc_now()
    return FixerResponse(
        success=True,
        historical=True,
        date=format_date(snapshot.date),
        timestamp=to_unix_seconds(moment),
        base=snapshot.base_currency,
        rates=dict(snapshot.rates),
    )


def response_to_payload(response: FixerResponse) -> Dict[str, Any]:
    """Plain dict form of a response, keeping rates as Decimal."""

    return {
        "success": response.success,
        "historical": response.historical,
        "date": response.date,
        "timestamp": response.timestamp,
        "base": response.base,
        "rates": dict(sorted(response.rates.items())),
    }


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise AssemblyError(f"Invalid date format in response: {value}") from exc


def format_date(value: date) -> str:
    return value.isoformat()
