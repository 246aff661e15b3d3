"""Cache storage abstraction.

Every persisted artifact (place coordinates, the station catalog, the
weather snapshot and the rate-limit timestamp) is addressed by a relative
key such as ``"places/poznan.json"`` and written as a whole value.  The
:class:`CacheStore` protocol lets the pipeline run against the local
filesystem (:class:`LocalCacheStore`) or entirely in memory
(:class:`MemoryCacheStore`).

Cache layout::

    <cache_dir>/
        .nominatim_last_call
        places/<key>.json
        stations/<key>.json
        stations.json
        weather/latest.json
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

PLACES_DIR = "places"
STATIONS_DIR = "stations"
WEATHER_DIR = "weather"
CATALOG_KEY = "stations.json"
SNAPSHOT_KEY = f"{WEATHER_DIR}/latest.json"
RATE_LIMIT_KEY = ".nominatim_last_call"


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for whole-value cache storage.

    Implementations must guarantee that a concurrent reader never observes
    a partially written value.
    """

    def read_text(self, key: str) -> str | None:
        """Return the stored text for *key*, or ``None`` if absent."""
        ...

    def write_text(self, key: str, text: str) -> None:
        """Replace the value stored under *key* in a single step."""
        ...

    def exists(self, key: str) -> bool:
        """Check whether a value is stored under *key*."""
        ...

    def remove(self, key: str) -> None:
        """Delete the value stored under *key* (no error if absent)."""
        ...


class LocalCacheStore:
    """Cache store backed by a directory on the local filesystem.

    Writes go to a temporary file in the destination directory which is then
    renamed over the target, so readers see either the old or the new file.
    """

    __slots__ = ("_root",)

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        """Root cache directory."""
        return self._root

    def ensure_layout(self) -> None:
        """Create the cache root and its standard subdirectories."""
        for sub in (PLACES_DIR, STATIONS_DIR, WEATHER_DIR):
            (self._root / sub).mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Return the filesystem path for *key*."""
        return self._root / key

    def read_text(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write_text(self, key: str, text: str) -> None:
        target = self.path_for(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=target.parent, prefix=".tmp_", suffix=".tmp", delete=False
        ) as tmp:
            tmp_path = Path(tmp.name)
        try:
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, target)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


class MemoryCacheStore:
    """In-process cache store, mainly useful for tests."""

    __slots__ = ("_data",)

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def read_text(self, key: str) -> str | None:
        return self._data.get(key)

    def write_text(self, key: str, text: str) -> None:
        self._data[key] = text

    def exists(self, key: str) -> bool:
        return key in self._data

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """All stored keys, sorted."""
        return sorted(self._data)


def read_json(store: CacheStore, key: str) -> Any | None:
    """Load JSON stored under *key*; ``None`` if absent or not valid JSON."""
    text = store.read_text(key)
    if text is None:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def write_json(store: CacheStore, key: str, data: Any) -> None:
    """Serialize *data* as JSON and store it under *key*."""
    store.write_text(key, json.dumps(data, ensure_ascii=False))
