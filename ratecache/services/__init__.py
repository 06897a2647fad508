"""Service layer modules."""

from __future__ import annotations

from ratecache.providers.restrictions import RestrictedCredentials

from .rate_store import RateStore
from .rates_cache import CachedRatesService, KeyedLocks


def init_restrictions(app) -> RestrictedCredentials:
    """Create the app's restricted-credential set.

    The configured default access key is not seeded; it is learned the first
    time the provider rejects a base-currency request for it.
    """

    restrictions = app.extensions.get("restricted_credentials")
    if restrictions is None:
        restrictions = RestrictedCredentials()
        app.extensions["restricted_credentials"] = restrictions
    return restrictions


def init_rates_service(app) -> CachedRatesService:
    """Attach the cache-aside service built on the app's store and provider."""

    provider = app.extensions["rate_provider"]
    service = CachedRatesService(RateStore(app.extensions["sqlalchemy_session_factory"]), provider)
    app.extensions["rates_service"] = service
    return service


__all__ = [
    "CachedRatesService",
    "KeyedLocks",
    "RateStore",
    "init_rates_service",
    "init_restrictions",
]
