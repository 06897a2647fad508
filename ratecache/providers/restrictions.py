"""Process-wide memory of access keys whose plan forbids the `base` parameter."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator

from ratecache.logging import mask_access_key

logger = logging.getLogger(__name__)


class RestrictedCredentials:
    """Thread-safe set of access keys known to be on a restricted plan.

    A key is added the first time the provider answers with the
    base-currency-restricted error and is never removed implicitly, so every
    later call for that key goes straight to restricted mode.
    """

    def __init__(self, initial: Iterable[str] | None = None) -> None:
        self._lock = threading.Lock()
        self._keys: set[str] = {key for key in (initial or ()) if key}

    def mark(self, access_key: str) -> bool:
        """Remember ``access_key``; return True if it was not known before."""

        with self._lock:
            if access_key in self._keys:
                return False
            self._keys.add(access_key)
        logger.info("Access key %s marked as base-currency restricted", mask_access_key(access_key))
        return True

    def is_restricted(self, access_key: str) -> bool:
        with self._lock:
            return access_key in self._keys

    def discard(self, access_key: str) -> None:
        with self._lock:
            self._keys.discard(access_key)

    def clear(self) -> None:
        with self._lock:
            self._keys.clear()

    def __contains__(self, access_key: object) -> bool:
        return isinstance(access_key, str) and self.is_restricted(access_key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._keys))

