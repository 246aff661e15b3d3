"""Place-name geocoding via the Nominatim (OpenStreetMap) API, with caching."""

from __future__ import annotations

import json
import logging
import re
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any
from urllib.error import URLError

from . import __version__
from .config import REQUEST_TIMEOUT
from .exceptions import GeocodeError
from .ratelimit import RateLimiter
from .storage import PLACES_DIR, CacheStore, read_json, write_json

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
USER_AGENT = f"mymeteo/{__version__} (kontakt@example.com)"

_NON_ALNUM = re.compile(r"[\W_]+")


def normalize_key(query: str) -> str:
    """Turn a free-text query into a cache key.

    The query is lowercased and every run of non-alphanumeric characters is
    collapsed into a single ``-``.  Letters outside ASCII are kept, so
    ``"Poznań"`` becomes ``"poznań"`` and ``"Nowy  Sącz"`` ``"nowy-sącz"``.
    """
    return _NON_ALNUM.sub("-", query.lower()).strip("-")


@dataclass(frozen=True, slots=True)
class PlaceCoordinate:
    """A geocoded place.

    Attributes:
        query: The query as originally given.
        latitude: Decimal degrees, north positive.
        longitude: Decimal degrees, east positive.
        raw_response: Provider response the coordinates were taken from.
    """

    query: str
    latitude: float
    longitude: float
    raw_response: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"query": self.query, "lat": self.latitude, "lon": self.longitude, "raw": self.raw_response}

    @classmethod
    def from_dict(cls, data: Any, query: str) -> PlaceCoordinate | None:
        """Rebuild from a cache entry; ``None`` if the entry is malformed."""
        if not isinstance(data, dict):
            return None
        try:
            lat = float(data["lat"])
            lon = float(data["lon"])
        except (KeyError, TypeError, ValueError):
            return None
        return cls(query=str(data.get("query", query)), latitude=lat, longitude=lon, raw_response=data.get("raw"))


class Geocoder:
    """Resolve place names to coordinates with a persistent cache.

    Cached names never touch the network or the rate limiter.  Uncached names
    cost exactly one provider request, issued only after
    :meth:`RateLimiter.wait` returns.  Failed lookups are not cached.

    Example::

        store = LocalCacheStore("~/.cache/mymeteo")
        geocoder = Geocoder(store, RateLimiter(store))
        place = geocoder.resolve("Poznań")
        print(place.latitude, place.longitude)

    Args:
        store: Cache store for ``places/<key>.json`` entries.
        limiter: Rate limiter shared by every caller of this provider.
        country: Country hint appended to each query.
        language: Value of the ``Accept-Language`` header.
        timeout: Request timeout in seconds.
    """

    __slots__ = ("_country", "_language", "_limiter", "_store", "_timeout")

    def __init__(
        self,
        store: CacheStore,
        limiter: RateLimiter,
        *,
        country: str | None = "Polska",
        language: str = "pl",
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._store = store
        self._limiter = limiter
        self._country = country
        self._language = language
        self._timeout = timeout

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    def cached(self, query: str) -> PlaceCoordinate | None:
        """Return the cached coordinate for *query* without any network access."""
        key = normalize_key(query)
        if not key:
            return None
        return PlaceCoordinate.from_dict(read_json(self._store, f"{PLACES_DIR}/{key}.json"), query)

    def resolve(self, query: str) -> PlaceCoordinate:
        """Resolve *query* to a :class:`PlaceCoordinate`.

        Raises:
            GeocodeError: If the query is blank, the provider returns no
                usable coordinates, or the request fails.
        """
        key = normalize_key(query)
        if not key:
            raise GeocodeError(query, "empty query")

        hit = self.cached(query)
        if hit is not None:
            logger.debug("Using cached coordinates for %r", query)
            return hit

        raw = self._request(query)
        try:
            first = raw[0]
            lat = float(first["lat"])
            lon = float(first["lon"])
        except (IndexError, KeyError, TypeError, ValueError):
            raise GeocodeError(query, "no results") from None

        place = PlaceCoordinate(query=query, latitude=lat, longitude=lon, raw_response=raw)
        write_json(self._store, f"{PLACES_DIR}/{key}.json", place.to_dict())
        return place

    def _request(self, query: str) -> Any:
        self._limiter.wait()

        q = f"{query}, {self._country}" if self._country else query
        params = urllib.parse.urlencode({"q": q, "format": "json", "limit": "1"})
        url = f"{NOMINATIM_URL}?{params}"
        headers = {"User-Agent": USER_AGENT, "Accept-Language": self._language}
        logger.debug("Querying Nominatim for %r", query)

        req = urllib.request.Request(url, headers=headers)  # noqa: S310
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:  # noqa: S310
                return json.loads(resp.read())
        except (URLError, TimeoutError, OSError, json.JSONDecodeError) as exc:
            raise GeocodeError(query, f"request failed ({exc})") from exc
