"""Station coordinate catalog built from the synop feed and the geocoder."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from .exceptions import CatalogBuildError, FetchError
from .feed import STATION_ID_FIELD, STATION_NAME_FIELD, Feed
from .geocode import Geocoder, normalize_key
from .progress import CatalogProgress, ProgressCallback, progress_callback
from .station import StationCatalog, StationRecord
from .storage import CATALOG_KEY, STATIONS_DIR, CacheStore, read_json, write_json

logger = logging.getLogger(__name__)


def unique_stations(records: Iterable[dict[str, Any]]) -> list[tuple[str, str]]:
    """Extract ``(station_id, station_name)`` pairs, one per station name.

    Rows with an empty id or name are skipped.  When several ids share a
    name, the first one in feed order is kept and the others are dropped.
    """
    seen: dict[str, str] = {}
    pairs: list[tuple[str, str]] = []
    for record in records:
        station_id = str(record.get(STATION_ID_FIELD) or "").strip()
        name = str(record.get(STATION_NAME_FIELD) or "").strip()
        if not station_id or not name:
            continue
        if name in seen:
            if seen[name] != station_id:
                logger.debug("Dropping station %s: name %r already used by %s", station_id, name, seen[name])
            continue
        seen[name] = station_id
        pairs.append((station_id, name))
    return pairs


class CatalogBuilder:
    """Build and persist the station coordinate catalog.

    A catalog already in the store is returned as long as it is well formed;
    it is never refreshed against the live feed.  Otherwise every unique
    station name from the feed is geocoded in turn and the catalog is
    written in one piece.  Any geocoding failure aborts the build and
    nothing is written to ``stations.json``.

    Args:
        store: Cache store for ``stations.json`` and ``stations/<key>.json``.
        geocoder: Geocoder used for station names (shares its rate limiter
            with every other lookup).
        feed: Source of the station list.
        on_progress: ``None``, a callable receiving :class:`CatalogProgress`,
            or ``"tqdm"``.
    """

    __slots__ = ("_feed", "_geocoder", "_on_progress", "_store")

    def __init__(
        self,
        store: CacheStore,
        geocoder: Geocoder,
        feed: Feed,
        *,
        on_progress: ProgressCallback | str | None = None,
    ) -> None:
        self._store = store
        self._geocoder = geocoder
        self._feed = feed
        self._on_progress = on_progress

    def load(self) -> StationCatalog | None:
        """Return the persisted catalog, or ``None`` if absent or malformed."""
        return StationCatalog.from_dict(read_json(self._store, CATALOG_KEY))

    def ensure_catalog(self) -> StationCatalog:
        """Return the persisted catalog, building it first if necessary.

        Raises:
            CatalogBuildError: If the station feed cannot be fetched.
            GeocodeError: If any station name cannot be geocoded.
        """
        catalog = self.load()
        if catalog is not None:
            logger.debug("Using cached station catalog (%d stations)", len(catalog))
            return catalog
        return self.build()

    def build(self) -> StationCatalog:
        """Rebuild the catalog from the live feed and replace the stored one."""
        logger.info("Generating the IMGW station coordinate catalog (the first run may take a while)...")
        try:
            records = self._feed.fetch()
        except FetchError as exc:
            msg = f"Could not download the IMGW station list: {exc.reason}"
            raise CatalogBuildError(msg) from exc

        pairs = unique_stations(records)
        stations: list[StationRecord] = []
        with progress_callback(self._on_progress) as callback:
            for done, (station_id, name) in enumerate(pairs, start=1):
                lat, lon = self._station_coordinates(name)
                stations.append(StationRecord(id=station_id, name=name, latitude=lat, longitude=lon))
                if callback is not None:
                    callback(CatalogProgress(done=done, total=len(pairs), name=name))

        catalog = StationCatalog.from_stations(stations)
        write_json(self._store, CATALOG_KEY, catalog.to_dict())
        logger.info("Station catalog saved with %d stations", len(catalog))
        return catalog

    def _station_coordinates(self, name: str) -> tuple[float, float]:
        key = f"{STATIONS_DIR}/{normalize_key(name)}.json"
        entry = read_json(self._store, key)
        if isinstance(entry, dict):
            try:
                return float(entry["lat"]), float(entry["lon"])
            except (KeyError, TypeError, ValueError):
                logger.debug("Ignoring malformed station cache entry %s", key)
        place = self._geocoder.resolve(name)
        write_json(self._store, key, {"lat": place.latitude, "lon": place.longitude, "name": name})
        return place.latitude, place.longitude
