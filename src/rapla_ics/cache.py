"""In-memory TTL cache for extracted calendars.

Thread-safe: entries are guarded by one lock, and loads by a lock per
key so that concurrent requests for the same page fetch it only once.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from .models import Calendar

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600


class CalendarCache:
    """Cache of :class:`Calendar` values keyed by upstream URL.

    :param ttl: Seconds an entry stays fresh.
    :param enabled: When ``False`` every lookup calls the loader.
    :param clock: Monotonic clock, replaceable in tests.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.enabled = enabled
        self._clock = clock
        self._entries: dict[str, tuple[float, Calendar]] = {}
        self._lock = threading.Lock()
        self._key_locks: dict[str, threading.Lock] = {}

    def _fresh(self, key: str) -> Calendar | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires, calendar = entry
            if self._clock() < expires:
                return calendar
            del self._entries[key]
            logger.debug("Cache entry expired for %s", key)
            return None

    def _sweep(self, now: float) -> None:
        """Drop expired entries. Caller holds ``_lock``."""
        expired = [k for k, (expires, _) in self._entries.items() if expires <= now]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))

    def _key_lock(self, key: str) -> threading.Lock:
        with self._lock:
            return self._key_locks.setdefault(key, threading.Lock())

    def get_or_load(self, key: str, loader: Callable[[], Calendar]) -> Calendar:
        """Return the cached calendar for *key*, loading it when stale.

        Exceptions raised by *loader* propagate and nothing is cached.

        :param key: Cache key, usually the upstream URL.
        :param loader: Called without arguments to produce a fresh value.
        :returns: The cached or freshly loaded calendar.
        """
        if not self.enabled:
            return loader()

        calendar = self._fresh(key)
        if calendar is not None:
            logger.debug("Cache hit for %s", key)
            return calendar

        lock = self._key_lock(key)
        with lock:
            try:
                # Another thread may have loaded it while we waited
                calendar = self._fresh(key)
                if calendar is not None:
                    return calendar

                logger.debug("Cache miss for %s", key)
                calendar = loader()
                with self._lock:
                    now = self._clock()
                    self._sweep(now)
                    self._entries[key] = (now + self.ttl, calendar)
                return calendar
            finally:
                with self._lock:
                    if self._key_locks.get(key) is lock:
                        del self._key_locks[key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
