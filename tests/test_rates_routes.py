from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
import responses
from responses import matchers

from ratecache.database import SessionLocal
from ratecache.services.rate_store import RateStore
from tests.factories import make_fixer_error, make_fixer_payload, make_snapshot

FIXER_URL = "https://fixer.test/api"
ACCESS_KEY = "route-test-key"


@pytest.fixture()
def store(db_session) -> RateStore:
    return RateStore(SessionLocal)


@responses.activate
def test_get_rates_cold_start_fetches_and_caches(client, store, restrictions):
    responses.add(
        responses.GET,
        f"{FIXER_URL}/2024-01-15",
        json=make_fixer_payload(rates={"USD": 1.095183, "GBP": 0.86208}),
        match=[
            matchers.query_param_matcher(
                {"access_key": ACCESS_KEY, "base": "EUR", "symbols": "USD,GBP"}
            )
        ],
    )

    response = client.get(f"/api/v1/rates/2024-01-15?symbols=usd,GBP&access_key={ACCESS_KEY}")

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["historical"] is True
    assert body["date"] == "2024-01-15"
    assert body["base"] == "EUR"
    assert isinstance(body["timestamp"], int)
    assert body["rates"] == {"GBP": 0.86208, "USD": 1.095183}
    assert store.get_rate(date(2024, 1, 15), "EUR", "USD") == Decimal("1.095183")
    assert "X-Request-ID" in response.headers


@responses.activate
def test_get_rates_cache_hit_makes_no_upstream_call(client, store, restrictions):
    store.save(make_snapshot(rates={"USD": "1.1", "GBP": "0.86", "CAD": "1.47"}))

    response = client.get(f"/api/v1/rates/2024-01-15?symbols=USD&access_key={ACCESS_KEY}")

    assert response.status_code == 200
    assert response.get_json()["rates"] == {"USD": 1.1}
    assert len(responses.calls) == 0


@responses.activate
def test_get_rates_uses_configured_defaults(client, store, restrictions):
    store.save(make_snapshot(rates={"USD": "1.1", "GBP": "0.86", "CAD": "1.47"}))

    response = client.get(f"/api/v1/rates/2024-01-15?access_key={ACCESS_KEY}")

    assert response.status_code == 200
    assert set(response.get_json()["rates"]) == {"USD", "GBP", "CAD"}
    assert len(responses.calls) == 0


@responses.activate
def test_get_rates_fills_only_the_gap(client, store, restrictions):
    store.save(make_snapshot(rates={"USD": "1.1", "GBP": "0.86", "CAD": "1.47"}))
    responses.add(
        responses.GET,
        f"{FIXER_URL}/2024-01-15",
        json=make_fixer_payload(rates={"JPY": 161.25}),
        match=[
            matchers.query_param_matcher({"access_key": ACCESS_KEY, "base": "EUR", "symbols": "JPY"})
        ],
    )

    response = client.get(
        f"/api/v1/rates/2024-01-15?symbols=USD,GBP,CAD,JPY&access_key={ACCESS_KEY}"
    )

    assert response.status_code == 200
    assert set(response.get_json()["rates"]) == {"USD", "GBP", "CAD", "JPY"}
    assert len(responses.calls) == 1
    assert store.count_rates(date(2024, 1, 15), "EUR") == 4


@responses.activate
def test_get_rates_falls_back_to_restricted_mode_and_remembers_key(client, store, restrictions):
    url = f"{FIXER_URL}/2024-01-15"
    responses.add(
        responses.GET,
        url,
        json=make_fixer_error(105, "base_currency_access_restricted"),
        match=[
            matchers.query_param_matcher({"access_key": ACCESS_KEY, "base": "USD", "symbols": "GBP"})
        ],
    )
    responses.add(
        responses.GET,
        url,
        json=make_fixer_payload(rates={"USD": 1.25, "GBP": 0.8}),
        match=[matchers.query_param_matcher({"access_key": ACCESS_KEY, "symbols": "GBP,USD"})],
    )

    response = client.get(f"/api/v1/rates/2024-01-15?symbols=GBP&base=usd&access_key={ACCESS_KEY}")

    assert response.status_code == 200
    body = response.get_json()
    assert body["base"] == "USD"
    assert body["rates"] == {"GBP": 0.64}
    assert ACCESS_KEY in restrictions

    health = client.get("/health/cache").get_json()
    assert health["restricted_credentials"] == 1


@pytest.mark.parametrize(
    ("path", "error_code", "message"),
    [
        ("/api/v1/rates/2024-13-01?access_key=k", "INVALID_INPUT", "Invalid month: 13"),
        ("/api/v1/rates/2024-01-32?access_key=k", "INVALID_INPUT", "Invalid date: 2024-01-32"),
        ("/api/v1/rates/2023-02-29?access_key=k", "INVALID_INPUT", "Invalid date: 2023-02-29"),
        ("/api/v1/rates/2024-01-15?symbols=US1&access_key=k", "INVALID_INPUT", "Invalid currency symbol"),
        ("/api/v1/rates/2024-01-15?base=EURO&access_key=k", "INVALID_INPUT", "Invalid currency symbol"),
        ("/api/v1/rates/2024-01-15", "MISSING_PARAMETER", "API key is required"),
    ],
)
@responses.activate
def test_invalid_requests_return_structured_400(client, db_session, path, error_code, message):
    response = client.get(path)

    assert response.status_code == 400
    body = response.get_json()
    assert body["status"] == 400
    assert body["error"] == "Bad Request"
    assert body["error_code"] == error_code
    assert message in body["message"]
    assert body["description"]
    assert body["path"] == path.split("?")[0]
    assert "timestamp" in body
    assert len(responses.calls) == 0


@responses.activate
def test_upstream_exhaustion_maps_to_502(client, db_session, restrictions):
    responses.add(responses.GET, f"{FIXER_URL}/2024-01-15", body="unavailable", status=503)

    response = client.get(f"/api/v1/rates/2024-01-15?symbols=USD&access_key={ACCESS_KEY}")

    assert response.status_code == 502
    body = response.get_json()
    assert body["error_code"] == "UPSTREAM_UNAVAILABLE"
    assert "503" in body["description"]
    # FIXER_MAX_RETRIES is 2 in the test configuration.
    assert len(responses.calls) == 3


@responses.activate
def test_upstream_rejection_maps_to_502_without_retry(client, db_session, restrictions):
    responses.add(
        responses.GET,
        f"{FIXER_URL}/2024-01-15",
        json=make_fixer_error(101, "invalid_access_key", "You have not supplied a valid API Access Key."),
    )

    response = client.get(f"/api/v1/rates/2024-01-15?symbols=USD&access_key={ACCESS_KEY}")

    assert response.status_code == 502
    body = response.get_json()
    assert body["error_code"] == "UPSTREAM_REJECTED"
    assert "invalid_access_key" in body["description"]
    assert len(responses.calls) == 1


def test_delete_invalidates_cache_entry(client, store):
    store.save(make_snapshot())

    response = client.delete("/api/v1/rates/2024-01-15?base=eur")

    assert response.status_code == 204
    SessionLocal.remove()
    assert store.find(date(2024, 1, 15), "EUR") is None
    assert store.count_rates(date(2024, 1, 15), "EUR") == 0


def test_delete_missing_entry_returns_404(client, db_session):
    response = client.delete("/api/v1/rates/2024-01-15")

    assert response.status_code == 404
    assert response.get_json()["error_code"] == "NOT_FOUND"


def test_delete_rejects_invalid_date(client, db_session):
    response = client.delete("/api/v1/rates/2024-02-30")

    assert response.status_code == 400
