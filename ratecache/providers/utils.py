"""Helper utilities for provider rate transformations."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Mapping


class RebaseError(ValueError):
    """Raised when rebasing rates fails due to missing data."""


def rebase_rates(
    rates: Mapping[str, Decimal],
    current_base: str,
    new_base: str,
) -> Dict[str, Decimal]:
    """Re-express rates quoted against ``current_base`` against ``new_base``.

    Restricted plans always answer in the provider's own base currency, so the
    requested base has to be among the returned symbols. The current base is
    implied at 1 when absent from ``rates``. Quotients keep the full precision
    of the active decimal context; nothing is rounded to a fixed scale.

    Raises:
        RebaseError: If the requested base is missing or has a zero rate.
    """

    normalized_rates = {code.upper(): Decimal(rate) for code, rate in rates.items()}
    normalized_current = current_base.strip().upper()
    normalized_new_base = new_base.strip().upper()
    normalized_rates.setdefault(normalized_current, Decimal(1))

    if normalized_new_base == normalized_current:
        return normalized_rates

    if normalized_new_base not in normalized_rates:
        raise RebaseError(
            f"Missing rate for {normalized_new_base} when rebasing from {normalized_current}."
        )

    base_rate = normalized_rates[normalized_new_base]
    if base_rate == 0:
        raise RebaseError(f"Cannot rebase using {normalized_new_base} with zero rate.")

    rebased: Dict[str, Decimal] = {}
    for code, value in normalized_rates.items():
        if code == normalized_new_base:
            rebased[code] = Decimal(1)
        else:
            rebased[code] = value / base_rate

    return rebased
