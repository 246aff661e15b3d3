"""Runtime configuration and rc-file loading.

Configuration is resolved in three layers: built-in defaults, then values
from an rc file (``~/.mymeteorc`` by default), then explicit arguments.
The rc file is a plain ``key=value`` list::

    # ~/.mymeteorc
    city=Poznań
    cache_dir=~/.cache/mymeteo
    color=no
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

MIN_GEOCODE_INTERVAL = 2.0
SNAPSHOT_TTL = 1800.0
REQUEST_TIMEOUT = 30.0

_FALSY = frozenset({"no", "false", "0", "off"})


def default_cache_dir() -> Path:
    """Return the platform-appropriate cache directory for mymeteo data."""
    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
        return base / "mymeteo" / "cache"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches" / "mymeteo"
    # Linux / other POSIX
    xdg = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg) if xdg else Path.home() / ".cache"
    return base / "mymeteo"


def default_rc_file() -> Path:
    """Return the default rc file location (``~/.mymeteorc``)."""
    return Path.home() / ".mymeteorc"


@dataclass(frozen=True, slots=True)
class MeteoConfig:
    """Resolved settings for a single lookup.

    Attributes:
        city: Place name to look up, or ``None`` if not yet provided.
        cache_dir: Root directory of the on-disk cache.
        color: Whether the presentation layer may colorize output.
        min_geocode_interval: Minimum seconds between two geocoding requests.
        snapshot_ttl: Seconds a weather snapshot stays fresh.
        request_timeout: Socket timeout for every outgoing request.
        serve_stale: Serve an expired snapshot (with a warning) when the
            refresh fails, instead of raising.
        country: Country hint appended to every geocoding query.
        language: Preferred response language for the geocoding provider.
    """

    city: str | None = None
    cache_dir: Path = Path()
    color: bool = True
    min_geocode_interval: float = MIN_GEOCODE_INTERVAL
    snapshot_ttl: float = SNAPSHOT_TTL
    request_timeout: float = REQUEST_TIMEOUT
    serve_stale: bool = False
    country: str = "Polska"
    language: str = "pl"

    def require_city(self) -> str:
        """Return the configured city name.

        Raises:
            ConfigError: If no (non-blank) city name is configured.
        """
        if self.city is None or not self.city.strip():
            msg = "A city name is required (--city or 'city=' in the rc file)"
            raise ConfigError(msg)
        return self.city.strip()


def expand_path(value: str | Path) -> Path:
    """Expand a leading ``~`` in *value*."""
    return Path(value).expanduser()


def parse_rc(path: str | Path) -> dict[str, str]:
    """Parse a ``key=value`` rc file.

    Blank lines and lines starting with ``#`` are skipped.  Keys are
    lowercased; keys and values are stripped of surrounding whitespace.
    A missing file yields an empty mapping.

    Raises:
        ConfigError: If the file exists but cannot be read.
    """
    rc_path = expand_path(path)
    if not rc_path.is_file():
        return {}
    try:
        text = rc_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read config file {rc_path}: {exc}"
        raise ConfigError(msg) from exc

    values: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, _, value = stripped.partition("=")
        key = key.strip().lower()
        if not key:
            continue
        values[key] = value.strip()
    return values


def load_config(
    city: str | None = None,
    cache_dir: str | Path | None = None,
    rc_file: str | Path | None = None,
    **overrides: Any,
) -> MeteoConfig:
    """Build a :class:`MeteoConfig` from defaults, the rc file and arguments.

    Explicit arguments take precedence over rc-file values, which take
    precedence over the built-in defaults.

    Args:
        city: Place name to look up.
        cache_dir: Cache directory override.
        rc_file: rc file path (default ``~/.mymeteorc``).
        **overrides: Any other :class:`MeteoConfig` field.
    """
    rc = parse_rc(rc_file if rc_file is not None else default_rc_file())

    config = MeteoConfig(cache_dir=default_cache_dir())
    if rc.get("cache_dir"):
        config = replace(config, cache_dir=expand_path(rc["cache_dir"]))
    if rc.get("color"):
        config = replace(config, color=rc["color"].lower() not in _FALSY)
    if rc.get("city"):
        config = replace(config, city=rc["city"])

    for key in rc.keys() - {"cache_dir", "color", "city"}:
        logger.debug("Ignoring unknown rc key %r", key)

    if city:
        config = replace(config, city=city)
    if cache_dir is not None:
        config = replace(config, cache_dir=expand_path(cache_dir))
    if overrides:
        config = replace(config, **overrides)

    logger.debug("Cache directory: %s", config.cache_dir)
    return config
