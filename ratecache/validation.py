"""Validation helpers for request parameters."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime

from ratecache.errors import MissingParameterError, ValidationError

DATE_FORMAT_LABEL = "YYYY-MM-DD"
DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def validate_date(value: str | date | None, *, field: str = "date") -> date:
    """Parse a ``YYYY-MM-DD`` string into a real calendar day."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if value is None or not str(value).strip():
        raise ValidationError(
            "Date parameter is required",
            description=(
                f"The '{field}' parameter cannot be null or empty. "
                f"Please provide a date in {DATE_FORMAT_LABEL} format."
            ),
        )

    text = str(value).strip()
    if not DATE_PATTERN.match(text):
        raise ValidationError(
            f"Invalid date format: {text}",
            description=(
                f"The date '{text}' does not match the required format "
                f"{DATE_FORMAT_LABEL}. Example: 2024-01-15"
            ),
        )

    year, month, day = (int(part) for part in text.split("-"))
    if not 1 <= month <= 12:
        raise ValidationError(
            f"Invalid month: {month}",
            description=(
                f"The month value '{month}' in date '{text}' is invalid. "
                "Month must be between 1 and 12."
            ),
        )

    try:
        return date(year, month, day)
    except ValueError as exc:
        raise ValidationError(
            f"Invalid date: {text}",
            description=f"The date '{text}' is not valid. {exc}.",
        ) from exc


def validate_currency_code(value: str | None, *, field: str = "base") -> str:
    """Normalize a single currency code to three upper-case letters."""

    if value is None or not str(value).strip():
        raise ValidationError(
            f"'{field}' is required.",
            description=f"The '{field}' parameter must be a 3-letter currency code.",
        )

    normalized = str(value).strip().upper()
    if not CURRENCY_PATTERN.match(normalized):
        raise ValidationError(
            f"Invalid currency symbol: '{value}'",
            description=f"Expected 3 letters (e.g., USD, EUR, GBP) for '{field}'.",
        )
    return normalized


def validate_symbols(value: str | Iterable[str] | None, *, field: str = "symbols") -> tuple[str, ...]:
    """Split, normalize and de-duplicate a symbol list, keeping request order."""

    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(
            "Symbols parameter cannot be empty",
            description=f"Provide a comma-separated list of currency codes in '{field}'.",
        )

    raw = value.split(",") if isinstance(value, str) else list(value)
    if not raw:
        raise ValidationError(
            "Symbols parameter cannot be empty",
            description=f"Provide a comma-separated list of currency codes in '{field}'.",
        )

    seen: dict[str, None] = {}
    for item in raw:
        if item is None or not str(item).strip():
            raise ValidationError(
                "Symbols parameter contains empty values",
                description=f"Remove empty entries from '{field}'.",
            )
        seen.setdefault(validate_currency_code(item, field=field), None)
    return tuple(seen)


def validate_access_key(value: str | None) -> str:
    if value is None or not str(value).strip():
        raise MissingParameterError(
            "API key is required",
            description=(
                "The 'access_key' query parameter is required. Please provide a valid "
                "Fixer API key. Example: /api/v1/rates/2024-01-15?access_key=YOUR_API_KEY"
            ),
        )
    return str(value).strip()
