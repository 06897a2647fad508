"""Registry and factory for rate providers."""

from __future__ import annotations

import os
from typing import Callable, Dict, Iterable, List

from .base import BaseRateProvider, ProviderError

ProviderFactory = Callable[[], BaseRateProvider]

_PROVIDER_FACTORIES: Dict[str, ProviderFactory] = {}


def _default_factories() -> Iterable[tuple[str, ProviderFactory]]:
    from flask import current_app

    from .fixer_provider import FixerRateProvider
    from .mock import MockRateProvider

    factories: list[tuple[str, ProviderFactory]] = [
        (MockRateProvider.name, MockRateProvider),
    ]

    def fixer_factory() -> FixerRateProvider:
        app = current_app
        return FixerRateProvider.from_config(
            app.config, app.extensions.get("restricted_credentials")
        )

    factories.append((FixerRateProvider.name, fixer_factory))
    return factories


def register_provider(name: str, factory: ProviderFactory) -> None:
    """Register a provider factory under the given name."""

    if not name:
        raise ValueError("Provider name cannot be empty.")
    _PROVIDER_FACTORIES[name.lower()] = factory


def unregister_provider(name: str) -> None:
    """Remove a provider factory; primarily for testing."""

    _PROVIDER_FACTORIES.pop(name.lower(), None)


def list_providers() -> List[str]:
    return sorted(_PROVIDER_FACTORIES.keys())


def _resolve_name(name: str | None = None) -> str:
    return (name or os.getenv("RATE_PROVIDER") or "fixer").lower()


def get_provider(name: str | None = None) -> BaseRateProvider:
    """Instantiate a provider using the supplied or configured name."""

    provider_name = _resolve_name(name)
    try:
        factory = _PROVIDER_FACTORIES[provider_name]
    except KeyError as exc:
        available = ", ".join(list_providers()) or "none registered"
        raise ProviderError(
            f"Unknown provider '{provider_name}'. Available providers: {available}"
        ) from exc
    return factory()


def init_provider(app) -> BaseRateProvider:
    """Attach the configured provider to the Flask app.

    Must run inside an application context, after the restricted-credential
    set has been registered in ``app.extensions``.
    """

    provider = get_provider(app.config.get("RATE_PROVIDER"))
    app.extensions["rate_provider"] = provider
    return provider


def reset_registry(default_factories: Iterable[tuple[str, ProviderFactory]] | None = None) -> None:
    """Reset provider registry; useful for tests."""

    _PROVIDER_FACTORIES.clear()

    factories = default_factories or _default_factories()
    for name, factory in factories:
        register_provider(name, factory)


reset_registry()
