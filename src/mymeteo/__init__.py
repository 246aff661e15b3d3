"""
mymeteo: current weather from the nearest IMGW synoptic station.

Given a city name, mymeteo geocodes it with Nominatim (OpenStreetMap), finds
the nearest station of the IMGW-PIB synop network and returns that station's
latest observation.  Geocoding results, the station coordinate catalog and
the observation feed are cached on disk.

Basic usage:
    from mymeteo import load_config, lookup

    result = lookup(load_config(city="Poznań"))
    print(result.station.name, result.distance_km)
    print(result.readings.temperature)

Lower-level pieces can be wired by hand:
    from mymeteo import Geocoder, LocalCacheStore, RateLimiter

    store = LocalCacheStore("/tmp/mymeteo")
    place = Geocoder(store, RateLimiter(store)).resolve("Kraków")
"""

from __future__ import annotations

__version__ = "1.0.0"

from .catalog import CatalogBuilder
from .config import MeteoConfig, default_cache_dir, load_config, parse_rc

# Exceptions
from .exceptions import (
    CatalogBuildError,
    ConfigError,
    EmptyCatalogError,
    FetchError,
    GeocodeError,
    MyMeteoError,
    NoMeasurementError,
)
from .feed import ATTRIBUTION, SynopFeed
from .geocode import Geocoder, PlaceCoordinate, normalize_key
from .measurement import UNAVAILABLE, Measurement
from .progress import CatalogProgress
from .ratelimit import RateLimiter
from .resolver import Resolution, Resolver, lookup
from .snapshot import SnapshotCache, WeatherSnapshot
from .spatial import find_nearest, haversine_km
from .station import NearestStation, StationCatalog, StationRecord
from .storage import CacheStore, LocalCacheStore, MemoryCacheStore

__all__ = [
    "ATTRIBUTION",
    "UNAVAILABLE",
    "CacheStore",
    "CatalogBuildError",
    "CatalogBuilder",
    "CatalogProgress",
    "ConfigError",
    "EmptyCatalogError",
    "FetchError",
    "GeocodeError",
    "Geocoder",
    "LocalCacheStore",
    "Measurement",
    "MemoryCacheStore",
    "MeteoConfig",
    "MyMeteoError",
    "NearestStation",
    "NoMeasurementError",
    "PlaceCoordinate",
    "RateLimiter",
    "Resolution",
    "Resolver",
    "SnapshotCache",
    "StationCatalog",
    "StationRecord",
    "SynopFeed",
    "WeatherSnapshot",
    "__version__",
    "default_cache_dir",
    "find_nearest",
    "haversine_km",
    "load_config",
    "lookup",
    "normalize_key",
    "parse_rc",
]
