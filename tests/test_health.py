"""Smoke tests for health endpoints."""

from __future__ import annotations


def test_health_endpoint_returns_ok(client):
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "ok"
    assert payload["app"] == "fixer-rate-cache"
    assert payload["provider"] == "fixer"


def test_health_cache_reports_restricted_credentials(client, restrictions):
    assert client.get("/health/cache").get_json() == {"status": "ok", "restricted_credentials": 0}

    restrictions.mark("some-key")

    response = client.get("/health/cache")
    assert response.status_code == 200
    assert response.get_json()["restricted_credentials"] == 1
