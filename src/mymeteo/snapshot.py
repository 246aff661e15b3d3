"""Time-boxed cache of the full synop observation feed."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from .config import SNAPSHOT_TTL
from .exceptions import FetchError
from .feed import STATION_ID_FIELD, Feed, MemoizedFeed
from .storage import SNAPSHOT_KEY, CacheStore, read_json, write_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WeatherSnapshot:
    """One complete download of current observations.

    Attributes:
        fetched_at: Epoch seconds when the feed was downloaded.
        observations: Raw station records, as returned by the feed.
    """

    fetched_at: float
    observations: tuple[dict[str, Any], ...]

    def age(self, now: float | None = None) -> float:
        """Seconds elapsed since the snapshot was fetched."""
        return (time.time() if now is None else now) - self.fetched_at

    def find(self, station_id: str) -> dict[str, Any] | None:
        """Return the first observation whose station id equals *station_id*."""
        for record in self.observations:
            if str(record.get(STATION_ID_FIELD)) == station_id:
                return record
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"fetched_at": self.fetched_at, "data": list(self.observations)}

    @classmethod
    def from_dict(cls, data: Any) -> WeatherSnapshot | None:
        """Rebuild from the persisted form; ``None`` if malformed."""
        if not isinstance(data, dict):
            return None
        fetched_at = data.get("fetched_at")
        observations = data.get("data")
        if isinstance(fetched_at, bool) or not isinstance(fetched_at, (int, float)):
            return None
        if not isinstance(observations, list) or not all(isinstance(r, dict) for r in observations):
            return None
        return cls(fetched_at=float(fetched_at), observations=tuple(observations))


class SnapshotCache:
    """Serve the observation feed from cache for a fixed time window.

    A stored snapshot younger than *ttl* seconds is returned unchanged.  An
    older or missing one is replaced wholesale by a fresh download.  If that
    download fails, :class:`FetchError` is raised even when an expired
    snapshot is on disk, unless *serve_stale* is set, in which case the
    expired snapshot is returned with a warning.

    Args:
        store: Cache store for ``weather/latest.json``.
        feed: Source of current observations.
        ttl: Freshness window in seconds (default 1800).
        serve_stale: Fall back to an expired snapshot when refreshing fails.
    """

    __slots__ = ("_feed", "_serve_stale", "_store", "_ttl")

    def __init__(
        self,
        store: CacheStore,
        feed: Feed,
        *,
        ttl: float = SNAPSHOT_TTL,
        serve_stale: bool = False,
    ) -> None:
        self._store = store
        self._feed = feed
        self._ttl = ttl
        self._serve_stale = serve_stale

    def load(self) -> WeatherSnapshot | None:
        """Return the stored snapshot regardless of age, if well formed."""
        return WeatherSnapshot.from_dict(read_json(self._store, SNAPSHOT_KEY))

    def is_fresh(self, snapshot: WeatherSnapshot, now: float | None = None) -> bool:
        return snapshot.age(now) < self._ttl

    def ensure_snapshot(self) -> WeatherSnapshot:
        """Return a fresh snapshot, downloading one if needed.

        Raises:
            FetchError: If a download is required and fails.
        """
        now = time.time()
        cached = self.load()
        if cached is not None and self.is_fresh(cached, now):
            logger.debug("Using cached weather snapshot (%.0fs old)", cached.age(now))
            return cached

        logger.info("Fetching fresh IMGW synop data...")
        try:
            records = self._feed.fetch()
        except FetchError:
            if self._serve_stale and cached is not None:
                logger.warning("Weather refresh failed; serving data %.0f minutes old", cached.age(now) / 60)
                return cached
            raise

        fetched_at = now
        if isinstance(self._feed, MemoizedFeed) and self._feed.fetched_at is not None:
            # The download may predate this call by a whole catalog build.
            fetched_at = self._feed.fetched_at
        snapshot = WeatherSnapshot(fetched_at=fetched_at, observations=tuple(records))
        write_json(self._store, SNAPSHOT_KEY, snapshot.to_dict())
        return snapshot
