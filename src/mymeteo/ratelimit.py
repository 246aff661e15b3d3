"""Persistent minimum-interval rate limiter for the geocoding provider."""

from __future__ import annotations

import logging
import threading
import time

from .config import MIN_GEOCODE_INTERVAL
from .storage import RATE_LIMIT_KEY, CacheStore

logger = logging.getLogger(__name__)


class RateLimiter:
    """Rate limiter enforcing a minimum interval between provider requests.

    The timestamp of the last request is persisted in the cache store so the
    interval also holds across separate invocations of the tool.  This is
    best-effort: two processes running at the same time are not mutually
    excluded.

    Args:
        store: Cache store holding the last-call timestamp.
        min_interval: Minimum seconds between requests (default 2.0).
        key: Store key of the timestamp.
    """

    __slots__ = ("_key", "_lock", "_min_interval", "_store")

    def __init__(
        self,
        store: CacheStore,
        min_interval: float = MIN_GEOCODE_INTERVAL,
        key: str = RATE_LIMIT_KEY,
    ) -> None:
        self._store = store
        self._min_interval = min_interval
        self._key = key
        self._lock = threading.Lock()

    @property
    def min_interval(self) -> float:
        return self._min_interval

    def last_call(self) -> float | None:
        """Return the persisted last-call time (epoch seconds), if any."""
        raw = self._store.read_text(self._key)
        if raw is None:
            return None
        try:
            return float(raw.strip())
        except ValueError:
            return None

    def wait(self) -> None:
        """Block until the next request is allowed, then record it.

        The new timestamp is written on every call, before the request is
        issued, so a failing request still counts against the interval.
        """
        with self._lock:
            last = self.last_call()
            if last is not None:
                elapsed = time.time() - last
                if elapsed < self._min_interval:
                    # A timestamp in the future means the clock stepped back.
                    delay = self._min_interval if elapsed < 0 else self._min_interval - elapsed
                    logger.debug("Delaying geocoding request by %.2fs", delay)
                    time.sleep(delay)
            self._store.write_text(self._key, repr(time.time()))

    def reset(self) -> None:
        """Forget the persisted timestamp (useful for testing)."""
        with self._lock:
            self._store.remove(self._key)
