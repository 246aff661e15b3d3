"""City-to-nearest-station weather lookup.

Composes the pipeline: geocode the city, make sure the station catalog
exists, pick the nearest station, make sure the weather snapshot is fresh,
then pull that station's record out of the snapshot.  Every step runs in
sequence and any failure ends the lookup.

Example::

    from mymeteo import load_config, lookup

    result = lookup(load_config(city="Poznań"))
    print(result.station.name, f"{result.distance_km:.1f} km")
    for label, value, unit in result.readings.rows():
        print(label, value, unit)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .catalog import CatalogBuilder
from .config import SNAPSHOT_TTL, MeteoConfig
from .exceptions import ConfigError, NoMeasurementError
from .feed import Feed, MemoizedFeed, SynopFeed
from .geocode import Geocoder, PlaceCoordinate
from .measurement import Measurement
from .progress import ProgressCallback
from .ratelimit import RateLimiter
from .snapshot import SnapshotCache
from .spatial import find_nearest
from .station import StationRecord
from .storage import CacheStore, LocalCacheStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of a successful lookup.

    Attributes:
        city: The city name that was looked up.
        place: Geocoded coordinates of the city.
        station: Nearest station from the catalog.
        distance_km: Great-circle distance from the city to the station.
        measurement: Raw feed record for the station.
    """

    city: str
    place: PlaceCoordinate
    station: StationRecord
    distance_km: float
    measurement: dict[str, Any]

    @property
    def readings(self) -> Measurement:
        """The reported fields, with missing values replaced by a sentinel."""
        return Measurement.from_record(self.measurement)


class Resolver:
    """Orchestrates a single city lookup.

    The store, geocoder (with its rate limiter) and feed are injected so the
    same instances are used by the direct city lookup and by the catalog
    build.  One resolution downloads the observation feed at most once, even
    when both the catalog and the snapshot need it.

    Args:
        store: Cache store shared by every component.
        geocoder: Geocoder for the city and for station names.
        feed: Source of station observations.
        snapshot_ttl: Freshness window of the weather snapshot.
        serve_stale: Serve an expired snapshot when refreshing fails.
        on_progress: Progress reporting for a catalog build.
    """

    __slots__ = ("_feed", "_geocoder", "_on_progress", "_serve_stale", "_snapshot_ttl", "_store")

    def __init__(
        self,
        store: CacheStore,
        geocoder: Geocoder,
        feed: Feed,
        *,
        snapshot_ttl: float = SNAPSHOT_TTL,
        serve_stale: bool = False,
        on_progress: ProgressCallback | str | None = None,
    ) -> None:
        self._store = store
        self._geocoder = geocoder
        self._feed = feed
        self._snapshot_ttl = snapshot_ttl
        self._serve_stale = serve_stale
        self._on_progress = on_progress

    @classmethod
    def from_config(
        cls,
        config: MeteoConfig,
        *,
        on_progress: ProgressCallback | str | None = None,
    ) -> Resolver:
        """Wire up the filesystem-backed pipeline described by *config*."""
        store = LocalCacheStore(config.cache_dir)
        store.ensure_layout()
        limiter = RateLimiter(store, min_interval=config.min_geocode_interval)
        geocoder = Geocoder(
            store,
            limiter,
            country=config.country,
            language=config.language,
            timeout=config.request_timeout,
        )
        return cls(
            store,
            geocoder,
            SynopFeed(timeout=config.request_timeout),
            snapshot_ttl=config.snapshot_ttl,
            serve_stale=config.serve_stale,
            on_progress=on_progress,
        )

    def resolve(self, city: str) -> Resolution:
        """Find the nearest station to *city* and its latest measurement.

        Raises:
            ConfigError: If *city* is blank.
            GeocodeError: If the city (or a station during a catalog build)
                cannot be geocoded.
            CatalogBuildError: If the catalog must be built and the station
                list cannot be fetched.
            EmptyCatalogError: If the catalog has no stations.
            FetchError: If a fresh snapshot is needed and cannot be fetched.
            NoMeasurementError: If the snapshot has no record for the station.
        """
        if not city or not city.strip():
            msg = "A city name is required"
            raise ConfigError(msg)
        city = city.strip()

        place = self._geocoder.resolve(city)
        logger.debug("City coordinates: %s,%s", place.latitude, place.longitude)

        feed = MemoizedFeed(self._feed)
        catalog = CatalogBuilder(self._store, self._geocoder, feed, on_progress=self._on_progress).ensure_catalog()

        nearest = find_nearest(place.latitude, place.longitude, catalog.stations)
        logger.info("Nearest station: %s (%.3f km)", nearest.station.name, nearest.distance_km)

        snapshot = SnapshotCache(
            self._store, feed, ttl=self._snapshot_ttl, serve_stale=self._serve_stale
        ).ensure_snapshot()
        record = snapshot.find(nearest.station.id)
        if record is None:
            raise NoMeasurementError(nearest.station.id, nearest.station.name)

        return Resolution(
            city=city,
            place=place,
            station=nearest.station,
            distance_km=nearest.distance_km,
            measurement=record,
        )


def lookup(config: MeteoConfig, *, on_progress: ProgressCallback | str | None = None) -> Resolution:
    """Resolve the city named in *config*.

    Raises:
        ConfigError: If *config* has no city, before any cache or network
            activity.
    """
    city = config.require_city()
    return Resolver.from_config(config, on_progress=on_progress).resolve(city)
