from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from ratecache.providers.assembler import (
    AssemblyError,
    response_from_snapshot,
    response_to_payload,
    snapshot_from_response,
)
from ratecache.providers.schemas import FixerResponse, RateSnapshot


def test_round_trip_preserves_date_base_and_exact_rates(load_json_fixture):
    original = FixerResponse.from_payload(load_json_fixture("fixer_historical_eur.json"))

    snapshot = snapshot_from_response(original)
    rebuilt = response_from_snapshot(snapshot, timestamp=datetime(2024, 1, 15, 23, 59, 59, tzinfo=UTC))

    assert rebuilt.date == original.date
    assert rebuilt.base == original.base
    assert rebuilt.rates == original.rates
    assert rebuilt.rates["USD"] == Decimal("1.095183")
    assert rebuilt.timestamp == original.timestamp


def test_snapshot_from_response_parses_date_and_keeps_execution_time():
    executed_at = datetime(2024, 1, 16, 10, 0, tzinfo=UTC)
    response = FixerResponse(success=True, date="2024-01-15", base="EUR", rates={"USD": 1.1})

    snapshot = snapshot_from_response(response, executed_at=executed_at)

    assert snapshot.date == date(2024, 1, 15)
    assert snapshot.executed_at == executed_at
    assert snapshot.rates == {"USD": Decimal("1.1")}


def test_snapshot_from_response_skips_non_positive_rates(caplog):
    response = FixerResponse(
        success=True, date="2024-01-15", base="EUR", rates={"USD": 1.1, "XXX": 0, "YYY": -2}
    )

    with caplog.at_level("WARNING"):
        snapshot = snapshot_from_response(response)

    assert snapshot.rates == {"USD": Decimal("1.1")}
    assert "Skipping invalid rate entry" in caplog.text


@pytest.mark.parametrize(
    "response",
    [
        None,
        FixerResponse(success=False, date="2024-01-15", base="EUR"),
        FixerResponse(success=True, date=None, base="EUR"),
        FixerResponse(success=True, date="", base="EUR"),
        FixerResponse(success=True, date="2024-01-15", base=None),
        FixerResponse(success=True, date="2024-01-15", base="  "),
        FixerResponse(success=True, date="15/01/2024", base="EUR"),
    ],
)
def test_snapshot_from_response_rejects_malformed_input(response):
    with pytest.raises(AssemblyError):
        snapshot_from_response(response)


def test_response_from_snapshot_uses_success_shape():
    executed_at = datetime(2024, 1, 16, 0, 0, tzinfo=UTC)
    snapshot = RateSnapshot(
        date=date(2024, 1, 15),
        base_currency="EUR",
        rates={"USD": Decimal("1.095183")},
        executed_at=executed_at,
    )

    payload = response_to_payload(response_from_snapshot(snapshot))

    assert payload == {
        "success": True,
        "historical": True,
        "date": "2024-01-15",
        "timestamp": int(executed_at.timestamp()),
        "base": "EUR",
        "rates": {"USD": Decimal("1.095183")},
    }


def test_response_from_snapshot_rejects_missing_snapshot():
    with pytest.raises(AssemblyError):
        response_from_snapshot(None)


def test_response_to_payload_sorts_rates():
    response = FixerResponse(
        success=True, date="2024-01-15", base="EUR", rates={"USD": 1, "CAD": 2, "GBP": 3}
    )

    assert list(response_to_payload(response)["rates"]) == ["CAD", "GBP", "USD"]
