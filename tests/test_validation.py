from __future__ import annotations

from datetime import date, datetime

import pytest

from ratecache.errors import MissingParameterError, ValidationError
from ratecache.validation import (
    validate_access_key,
    validate_currency_code,
    validate_date,
    validate_symbols,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-01-15", date(2024, 1, 15)),
        ("2024-02-29", date(2024, 2, 29)),
        (" 2000-02-29 ", date(2000, 2, 29)),
        (date(2024, 1, 15), date(2024, 1, 15)),
        (datetime(2024, 1, 15, 10, 30), date(2024, 1, 15)),
    ],
)
def test_validate_date_accepts_real_days(value, expected):
    assert validate_date(value) == expected


@pytest.mark.parametrize(
    ("value", "message"),
    [
        ("2024-13-01", "Invalid month: 13"),
        ("2024-00-10", "Invalid month: 0"),
        ("2024-01-32", "Invalid date: 2024-01-32"),
        ("2023-02-29", "Invalid date: 2023-02-29"),
        ("1900-02-29", "Invalid date: 1900-02-29"),
        ("2024-1-15", "Invalid date format: 2024-1-15"),
        ("15-01-2024", "Invalid date format: 15-01-2024"),
        ("２０２４-01-15", "Invalid date format"),
        ("", "Date parameter is required"),
        (None, "Date parameter is required"),
    ],
)
def test_validate_date_rejects_malformed_days(value, message):
    with pytest.raises(ValidationError) as exc_info:
        validate_date(value)

    assert message in exc_info.value.message
    assert exc_info.value.error_code == "INVALID_INPUT"
    assert exc_info.value.description


def test_validate_currency_code_normalizes():
    assert validate_currency_code(" usd ") == "USD"


@pytest.mark.parametrize("value", ["US", "USDT", "U1D", "", None, "ÜSD"])
def test_validate_currency_code_rejects(value):
    with pytest.raises(ValidationError):
        validate_currency_code(value)


def test_validate_symbols_splits_normalizes_and_deduplicates():
    assert validate_symbols("usd, GBP,USD,cad") == ("USD", "GBP", "CAD")
    assert validate_symbols(["eur", "EUR"]) == ("EUR",)


@pytest.mark.parametrize("value", ["", "   ", None, [], "USD,,GBP", "USD,GB", "USD;GBP"])
def test_validate_symbols_rejects(value):
    with pytest.raises(ValidationError):
        validate_symbols(value)


def test_validate_access_key():
    assert validate_access_key(" key ") == "key"
    with pytest.raises(MissingParameterError) as exc_info:
        validate_access_key(None)
    assert exc_info.value.error_code == "MISSING_PARAMETER"
    assert exc_info.value.message == "API key is required"
