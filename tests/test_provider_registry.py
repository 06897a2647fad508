from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ratecache.providers import BaseRateProvider, FixerRateProvider, ProviderError, RateSnapshot
from ratecache.providers.mock import MockRateProvider
from ratecache.providers.registry import (
    get_provider,
    init_provider,
    list_providers,
    register_provider,
    reset_registry,
    unregister_provider,
)


@pytest.fixture(autouse=True)
def _reset_providers():
    reset_registry()
    yield
    reset_registry()


def test_default_registry_lists_fixer_and_mock():
    assert list_providers() == ["fixer", "mock"]


def test_mock_provider_is_deterministic():
    provider = get_provider("mock")
    assert isinstance(provider, MockRateProvider)

    first = provider.fetch("2024-01-15", "eur", "USD,GBP,XXX", "any-key")
    second = provider.fetch("2024-01-15", "EUR", ["USD", "GBP"], "any-key")

    assert isinstance(first, RateSnapshot)
    assert first.rates == second.rates
    assert first.rates == {"USD": Decimal("1.0950"), "GBP": Decimal("0.8620")}
    assert first.date == date(2024, 1, 15)
    assert vars(provider) == {}
    assert MockRateProvider().fetch("2024-01-15", "EUR", ["GBP"], "other-key").rates == {
        "GBP": Decimal("0.8620")
    }


def test_mock_provider_rebases_to_the_requested_base():
    snapshot = MockRateProvider().fetch("2024-01-15", "USD", ["EUR"], "any-key")

    assert snapshot.base_currency == "USD"
    assert snapshot.rates["EUR"] == Decimal(1) / Decimal("1.0950")


def test_fixer_factory_uses_app_config_and_restrictions(app):
    with app.app_context():
        provider = get_provider("fixer")

    assert isinstance(provider, FixerRateProvider)
    assert provider.restrictions is app.extensions["restricted_credentials"]


def test_get_provider_respects_environment(monkeypatch):
    class AlternateProvider(MockRateProvider):
        name = "alternate"

    register_provider("alternate", AlternateProvider)
    monkeypatch.setenv("RATE_PROVIDER", "alternate")

    assert isinstance(get_provider(), AlternateProvider)


def test_get_provider_unknown_name_raises():
    with pytest.raises(ProviderError, match="does-not-exist"):
        get_provider("does-not-exist")


def test_register_provider_requires_name():
    with pytest.raises(ValueError):
        register_provider("", MockRateProvider)


def test_unregister_provider():
    unregister_provider("mock")

    assert "mock" not in list_providers()


def test_init_provider_attaches_instance():
    class DummyApp:
        def __init__(self) -> None:
            self.config = {"RATE_PROVIDER": "mock"}
            self.extensions: dict[str, BaseRateProvider] = {}

    app = DummyApp()
    provider = init_provider(app)

    assert isinstance(provider, MockRateProvider)
    assert app.extensions["rate_provider"] is provider
