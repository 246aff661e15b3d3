"""Presentation-ready view of a single station observation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

UNAVAILABLE = "brak"


@dataclass(frozen=True, slots=True)
class Field:
    """Describes one reported measurement."""

    key: str
    label: str
    unit: str


FIELDS: tuple[Field, ...] = (
    Field("temperatura", "Temperatura", "°C"),
    Field("predkosc_wiatru", "Prędkość wiatru", "m/s"),
    Field("kierunek_wiatru", "Kierunek wiatru", "°"),
    Field("wilgotnosc_wzgledna", "Wilgotność wzgl.", "%"),
    Field("suma_opadu", "Suma opadu", "mm"),
    Field("cisnienie", "Ciśnienie", "hPa"),
)


def _value(record: dict[str, Any], key: str) -> str:
    value = record.get(key)
    if value is None or value is False or value == "":
        return UNAVAILABLE
    return str(value)


@dataclass(frozen=True, slots=True)
class Measurement:
    """The six reported fields of an observation, as strings.

    Any field missing from the feed record (or null or empty) holds
    :data:`UNAVAILABLE` instead.
    """

    temperature: str
    wind_speed: str
    wind_direction: str
    relative_humidity: str
    precipitation: str
    pressure: str
    date: str
    hour: str

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Measurement:
        return cls(
            temperature=_value(record, "temperatura"),
            wind_speed=_value(record, "predkosc_wiatru"),
            wind_direction=_value(record, "kierunek_wiatru"),
            relative_humidity=_value(record, "wilgotnosc_wzgledna"),
            precipitation=_value(record, "suma_opadu"),
            pressure=_value(record, "cisnienie"),
            date=_value(record, "data_pomiaru"),
            hour=_value(record, "godzina_pomiaru"),
        )

    @property
    def observed_at(self) -> str:
        """Observation date and hour, e.g. ``"2024-01-15 12"``."""
        return f"{self.date} {self.hour}"

    def rows(self) -> list[tuple[str, str, str]]:
        """``(label, value, unit)`` triples in display order."""
        values = (
            self.temperature,
            self.wind_speed,
            self.wind_direction,
            self.relative_humidity,
            self.precipitation,
            self.pressure,
        )
        return [(f.label, v, f.unit) for f, v in zip(FIELDS, values)]
