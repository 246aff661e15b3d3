"""Custom exceptions for mymeteo."""

from __future__ import annotations


class MyMeteoError(Exception):
    """Base exception for all mymeteo errors."""

    pass


class ConfigError(MyMeteoError):
    """Raised when a required configuration input is missing or unreadable."""


class GeocodeError(MyMeteoError):
    """Raised when a place name cannot be resolved to coordinates.

    Attributes:
        query: The free-text query that failed.
    """

    def __init__(self, query: str, reason: str = "no results") -> None:
        self.query = query
        self.reason = reason
        super().__init__(f"Failed to geocode '{query}': {reason}")


class FetchError(MyMeteoError):
    """Raised when the synop observation feed cannot be fetched."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class CatalogBuildError(MyMeteoError):
    """Raised when the station catalog cannot be (re)built from the live feed."""


class EmptyCatalogError(MyMeteoError):
    """Raised when a nearest-station search is run over zero stations."""

    def __init__(self) -> None:
        super().__init__("Station catalog contains no stations")


class NoMeasurementError(MyMeteoError):
    """Raised when the current snapshot has no record for the resolved station.

    Attributes:
        station_id: Identifier of the station that was looked up.
        station_name: Human-readable station name, if known.
    """

    def __init__(self, station_id: str, station_name: str | None = None) -> None:
        self.station_id = station_id
        self.station_name = station_name
        label = f"{station_name} ({station_id})" if station_name else station_id
        super().__init__(f"No measurement data for station {label}")
