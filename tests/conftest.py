"""Shared fixtures for mymeteo tests."""

from __future__ import annotations

import json
from typing import Any

import pytest

from mymeteo.storage import MemoryCacheStore


class FakeClock:
    """Stand-in for the ``time`` module: ``sleep`` advances ``time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeFeed:
    """Feed returning canned records and counting downloads."""

    def __init__(self, records: list[dict[str, Any]] | None = None, error: Exception | None = None) -> None:
        self.records = records or []
        self.error = error
        self.calls = 0

    def fetch(self) -> list[dict[str, Any]]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.records


def place_entry(lat: float, lon: float, query: str = "") -> str:
    return json.dumps({"query": query, "lat": lat, "lon": lon, "raw": []})


@pytest.fixture
def store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def synop_records() -> list[dict[str, Any]]:
    """A trimmed copy of the IMGW synop feed."""
    return [
        {
            "id_stacji": "12330",
            "stacja": "Poznań",
            "data_pomiaru": "2024-01-15",
            "godzina_pomiaru": "12",
            "temperatura": "5.2",
            "predkosc_wiatru": "3",
            "kierunek_wiatru": "240",
            "wilgotnosc_wzgledna": "81.4",
            "suma_opadu": "0",
            "cisnienie": "1013.2",
        },
        {
            "id_stacji": "12375",
            "stacja": "Warszawa",
            "data_pomiaru": "2024-01-15",
            "godzina_pomiaru": "12",
            "temperatura": "3.1",
            "predkosc_wiatru": "2",
            "kierunek_wiatru": "200",
            "wilgotnosc_wzgledna": "90.0",
            "suma_opadu": "0.4",
            "cisnienie": None,
        },
        {
            "id_stacji": "12566",
            "stacja": "Kraków",
            "data_pomiaru": "2024-01-15",
            "godzina_pomiaru": "12",
            "temperatura": "1.0",
            "predkosc_wiatru": "1",
            "kierunek_wiatru": "90",
            "wilgotnosc_wzgledna": "95.2",
            "suma_opadu": "1.2",
            "cisnienie": "1009.8",
        },
    ]


@pytest.fixture
def make_feed() -> type[FakeFeed]:
    return FakeFeed


@pytest.fixture
def place_json() -> Any:
    return place_entry
