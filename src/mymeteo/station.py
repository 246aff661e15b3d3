"""Weather station data model and search result types."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True, slots=True)
class StationRecord:
    """A synoptic station with coordinates resolved from its name.

    Attributes:
        id: Station identifier as used by the observation feed (``id_stacji``).
        name: Station name as published in the feed (``stacja``).
        latitude: Decimal degrees, north positive.
        longitude: Decimal degrees, east positive.
    """

    id: str
    name: str
    latitude: float
    longitude: float

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "lat": self.latitude, "lon": self.longitude}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StationRecord:
        """Create a record from its catalog form.

        Raises:
            KeyError, TypeError, ValueError: If the entry is malformed.
        """
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            latitude=float(data["lat"]),
            longitude=float(data["lon"]),
        )


@dataclass(frozen=True, slots=True)
class StationCatalog:
    """The full set of known stations, in the order they were built.

    The order matters: nearest-station ties go to the earlier entry.
    """

    stations: tuple[StationRecord, ...]
    generated_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def __len__(self) -> int:
        return len(self.stations)

    def get(self, station_id: str) -> StationRecord | None:
        """Look up a station by its identifier."""
        for station in self.stations:
            if station.id == station_id:
                return station
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at.isoformat(),
            "stations": [s.to_dict() for s in self.stations],
        }

    @classmethod
    def from_dict(cls, data: Any) -> StationCatalog | None:
        """Rebuild a catalog from its persisted form.

        Returns ``None`` if *data* has no ``stations`` list or any entry lacks
        the expected fields.  A missing or unparsable ``generated_at`` is
        tolerated.
        """
        if not isinstance(data, dict) or not isinstance(data.get("stations"), list):
            return None
        try:
            stations = tuple(StationRecord.from_dict(s) for s in data["stations"])
        except (KeyError, TypeError, ValueError):
            return None
        try:
            generated_at = datetime.fromisoformat(data["generated_at"])
        except (KeyError, TypeError, ValueError):
            generated_at = datetime.fromtimestamp(0, tz=timezone.utc)
        return cls(stations=stations, generated_at=generated_at)

    @classmethod
    def from_stations(cls, stations: Sequence[StationRecord]) -> StationCatalog:
        """Create a catalog from an explicit station list (useful for tests)."""
        return cls(stations=tuple(stations))


@dataclass(frozen=True, slots=True)
class NearestStation:
    """A nearest-station result with great-circle distance."""

    station: StationRecord
    distance_km: float
    """Great-circle distance in kilometres."""
