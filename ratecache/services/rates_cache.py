"""Cache-aside retrieval of daily rates: read the store, fetch only the gap."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from time import perf_counter
from typing import Dict, Optional

from ratecache.logging import cache_log_extra
from ratecache.providers.base import BaseRateProvider
from ratecache.providers.schemas import RateSnapshot
from ratecache.validation import validate_access_key, validate_currency_code, validate_date, validate_symbols

from .rate_store import RateStore

logger = logging.getLogger(__name__)

CacheKey = tuple[date, str]


class _KeyLock:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class KeyedLocks:
    """One lock per cache key, alive only while someone holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[CacheKey, _KeyLock] = {}

    @contextmanager
    def hold(self, key: CacheKey) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class CachedRatesService:
    """Serve (date, base, symbols) requests with as few upstream calls as possible.

    Requests for the same key are serialised across read, fetch and save, so
    concurrent callers asking for the same gap share one upstream call.
    Different keys never wait on each other.
    """

    def __init__(
        self,
        store: RateStore,
        provider: BaseRateProvider,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._store = store
        self._provider = provider
        self._locks = locks if locks is not None else KeyedLocks()

    def get_rates(
        self,
        day: date | str,
        base: str,
        symbols: Iterable[str] | str,
        access_key: str,
    ) -> RateSnapshot:
        """Return the snapshot for ``(day, base)`` covering every requested symbol.

        The returned snapshot is everything cached for the key after any gap
        has been filled, so it may hold more symbols than were asked for.
        Provider failures propagate unchanged; nothing stale is returned in
        their place.
        """

        rate_date = validate_date(day)
        base_currency = validate_currency_code(base, field="base")
        requested = validate_symbols(symbols)
        key = validate_access_key(access_key)
        day_str = rate_date.isoformat()

        with self._locks.hold((rate_date, base_currency)):
            cached = self._store.find(rate_date, base_currency)

            if cached is None:
                logger.info(
                    "No cached rates for %s/%s, fetching from provider",
                    day_str,
                    base_currency,
                    extra=cache_log_extra(
                        day=day_str, base=base_currency, outcome="miss", requested=list(requested)
                    ),
                )
                fetched = self._fetch(rate_date, base_currency, requested, key)
                self._store.save(fetched)
                return fetched

            missing = [code for code in requested if code not in cached.rates]
            if not missing:
                logger.info(
                    "Serving %s/%s from cache",
                    day_str,
                    base_currency,
                    extra=cache_log_extra(day=day_str, base=base_currency, outcome="hit"),
                )
                return cached

            logger.info(
                "Cached rates for %s/%s lack %s, fetching the gap",
                day_str,
                base_currency,
                ",".join(missing),
                extra=cache_log_extra(
                    day=day_str, base=base_currency, outcome="partial", missing=missing
                ),
            )
            fetched = self._fetch(rate_date, base_currency, tuple(missing), key)
            merged = cached.merged_with(fetched)
            self._store.save(merged)
            return merged

    def _fetch(
        self,
        rate_date: date,
        base_currency: str,
        symbols: tuple[str, ...],
        access_key: str,
    ) -> RateSnapshot:
        start = perf_counter()
        snapshot = self._provider.fetch(rate_date, base_currency, symbols, access_key)
        logger.debug(
            "Provider returned %s rates for %s/%s in %.1fms",
            len(snapshot.rates),
            rate_date,
            base_currency,
            (perf_counter() - start) * 1000,
        )
        return snapshot

    def is_cached(self, day: date | str, base: str) -> bool:
        return self._store.exists(validate_date(day), validate_currency_code(base))

    def clear(self, day: date | str, base: str) -> bool:
        """Invalidate the cache entry for ``(day, base)``; True if one existed."""

        rate_date = validate_date(day)
        base_currency = validate_currency_code(base)
        with self._locks.hold((rate_date, base_currency)):
            logger.info("Clearing cache for %s/%s", rate_date, base_currency)
            return self._store.delete(rate_date, base_currency)

    def cached_rate(self, day: date | str, base: str, target: str) -> Optional[Decimal]:
        return self._store.get_rate(
            validate_date(day),
            validate_currency_code(base),
            validate_currency_code(target, field="target"),
        )

    def cached_count(self, day: date | str, base: str) -> int:
        return self._store.count_rates(validate_date(day), validate_currency_code(base))
