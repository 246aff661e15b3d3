"""Client for the IMGW-PIB public synop observation feed.

The endpoint has no per-station query: every request returns the current
observations of all synoptic stations as one JSON list of records such as::

    {"id_stacji": "12330", "stacja": "Poznań", "data_pomiaru": "2024-01-15",
     "godzina_pomiaru": "12", "temperatura": "5.2", "predkosc_wiatru": "3",
     "kierunek_wiatru": "240", "wilgotnosc_wzgledna": "81.4",
     "suma_opadu": "0", "cisnienie": "1013.2"}
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Protocol
from urllib.error import URLError
from urllib.request import Request, urlopen

from .config import REQUEST_TIMEOUT
from .exceptions import FetchError
from .geocode import USER_AGENT

logger = logging.getLogger(__name__)

SYNOP_URL = "https://danepubliczne.imgw.pl/api/data/synop"
ATTRIBUTION = "IMGW-PIB (https://danepubliczne.imgw.pl/)"

STATION_ID_FIELD = "id_stacji"
STATION_NAME_FIELD = "stacja"


class Feed(Protocol):
    """Anything that can return the full list of station observations."""

    def fetch(self) -> list[dict[str, Any]]: ...


class SynopFeed:
    """Fetch-all client for the synop feed.

    Args:
        url: Feed endpoint.
        timeout: Request timeout in seconds.
    """

    __slots__ = ("_timeout", "_url")

    def __init__(self, url: str = SYNOP_URL, timeout: float = REQUEST_TIMEOUT) -> None:
        self._url = url
        self._timeout = timeout

    @property
    def url(self) -> str:
        return self._url

    def fetch(self) -> list[dict[str, Any]]:
        """Download the full list of current station observations.

        Raises:
            FetchError: On transport failure or if the payload is not a JSON
                list of objects.
        """
        logger.debug("GET %s", self._url)
        req = Request(self._url, headers={"User-Agent": USER_AGENT})  # noqa: S310
        try:
            with urlopen(req, timeout=self._timeout) as resp:  # noqa: S310
                data = json.loads(resp.read())
        except (URLError, TimeoutError, OSError) as exc:
            raise FetchError(self._url, str(exc)) from exc
        except json.JSONDecodeError as exc:
            raise FetchError(self._url, "response is not valid JSON") from exc

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise FetchError(self._url, "expected a JSON list of station records")
        return data


class MemoizedFeed:
    """Wrap a feed so that at most one request is made during its lifetime.

    Used by the resolver to share a single download between the catalog
    builder and the snapshot cache on a cold start.
    """

    __slots__ = ("_feed", "_fetched_at", "_records")

    def __init__(self, feed: Feed) -> None:
        self._feed = feed
        self._records: list[dict[str, Any]] | None = None
        self._fetched_at: float | None = None

    @property
    def fetched(self) -> bool:
        """Whether the underlying feed has already been downloaded."""
        return self._records is not None

    @property
    def fetched_at(self) -> float | None:
        """Epoch seconds when the download was started, or ``None`` before it."""
        return self._fetched_at

    def fetch(self) -> list[dict[str, Any]]:
        if self._records is None:
            started = time.time()
            self._records = self._feed.fetch()
            self._fetched_at = started
        return self._records
