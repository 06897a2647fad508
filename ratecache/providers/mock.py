"""Mock provider implementation for testing and local development."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from ratecache.utils.datetime import utc_now
from ratecache.validation import validate_access_key, validate_currency_code, validate_date, validate_symbols

from .base import BaseRateProvider
from .schemas import RateSnapshot
from .utils import RebaseError, rebase_rates

MOCK_PROVIDER_BASE = "EUR"

EUR_RATES: dict[str, Decimal] = {
    "USD": Decimal("1.0950"),
    "GBP": Decimal("0.8620"),
    "CAD": Decimal("1.4710"),
    "JPY": Decimal("161.25"),
    "CHF": Decimal("0.9410"),
    "AUD": Decimal("1.6480"),
    "TRY": Decimal("33.1200"),
}


class MockRateProvider(BaseRateProvider):
    """Deterministic provider returning synthetic rates; no network access."""

    name = "mock"

    def fetch(
        self,
        day: date | str,
        base: str,
        symbols: Iterable[str],
        access_key: str,
    ) -> RateSnapshot:
        rate_date = validate_date(day)
        base_currency = validate_currency_code(base, field="base")
        wanted = validate_symbols(symbols)
        validate_access_key(access_key)

        try:
            rates = rebase_rates(EUR_RATES, MOCK_PROVIDER_BASE, base_currency)
        except RebaseError:
            rates = {}
        return RateSnapshot(
            date=rate_date,
            base_currency=base_currency,
            rates={code: rates[code] for code in wanted if code in rates},
            executed_at=utc_now(),
        )
