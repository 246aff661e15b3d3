"""Tests for mymeteo.snapshot (fake feed and clock, no network)."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from mymeteo.exceptions import FetchError
from mymeteo.feed import SYNOP_URL, MemoizedFeed
from mymeteo.snapshot import SnapshotCache, WeatherSnapshot
from mymeteo.storage import SNAPSHOT_KEY, MemoryCacheStore

NOW = 1_700_000_000


def _store_snapshot(store: MemoryCacheStore, fetched_at: float, data: list | None = None) -> None:
    store.write_text(SNAPSHOT_KEY, json.dumps({"fetched_at": fetched_at, "data": data or [{"id_stacji": "old"}]}))


class TestWeatherSnapshot:
    def test_find(self, synop_records: list) -> None:
        snap = WeatherSnapshot(fetched_at=NOW, observations=tuple(synop_records))
        assert snap.find("12375")["stacja"] == "Warszawa"
        assert snap.find("99999") is None

    def test_find_numeric_id(self) -> None:
        snap = WeatherSnapshot(fetched_at=NOW, observations=({"id_stacji": 12330},))
        assert snap.find("12330") is not None

    @pytest.mark.parametrize(
        "data",
        [None, [], {"data": []}, {"fetched_at": "123", "data": []}, {"fetched_at": True, "data": []},
         {"fetched_at": 1, "data": {}}, {"fetched_at": 1, "data": [1]}],
    )
    def test_from_dict_malformed(self, data: object) -> None:
        assert WeatherSnapshot.from_dict(data) is None

    def test_age(self) -> None:
        assert WeatherSnapshot(fetched_at=100, observations=()).age(now=160) == 60


class TestSnapshotCache:
    def test_fresh_snapshot_reused(self, store: MemoryCacheStore, make_feed) -> None:
        _store_snapshot(store, NOW - 1799)
        feed = make_feed([{"id_stacji": "new"}])
        with patch("mymeteo.snapshot.time") as mock_time:
            mock_time.time.return_value = NOW
            snap = SnapshotCache(store, feed).ensure_snapshot()
        assert feed.calls == 0
        assert snap.find("old") is not None

    def test_expired_snapshot_refetched(self, store: MemoryCacheStore, make_feed) -> None:
        _store_snapshot(store, NOW - 1801)
        feed = make_feed([{"id_stacji": "new"}])
        with patch("mymeteo.snapshot.time") as mock_time:
            mock_time.time.return_value = NOW
            snap = SnapshotCache(store, feed).ensure_snapshot()
        assert feed.calls == 1
        assert snap.find("old") is None
        assert json.loads(store.read_text(SNAPSHOT_KEY)) == {"fetched_at": NOW, "data": [{"id_stacji": "new"}]}

    def test_missing_snapshot_fetched(self, store: MemoryCacheStore, make_feed, synop_records: list) -> None:
        feed = make_feed(synop_records)
        snap = SnapshotCache(store, feed).ensure_snapshot()
        assert feed.calls == 1
        assert len(snap.observations) == 3
        assert store.exists(SNAPSHOT_KEY)

    def test_malformed_snapshot_refetched(self, store: MemoryCacheStore, make_feed) -> None:
        store.write_text(SNAPSHOT_KEY, '{"fetched_at": "yesterday", "data": []}')
        feed = make_feed([])
        SnapshotCache(store, feed).ensure_snapshot()
        assert feed.calls == 1

    def test_expired_and_fetch_fails_raises(self, store: MemoryCacheStore, make_feed) -> None:
        _store_snapshot(store, NOW - 4000)
        before = store.read_text(SNAPSHOT_KEY)
        feed = make_feed(error=FetchError(SYNOP_URL, "down"))
        with patch("mymeteo.snapshot.time") as mock_time:
            mock_time.time.return_value = NOW
            with pytest.raises(FetchError):
                SnapshotCache(store, feed).ensure_snapshot()
        assert store.read_text(SNAPSHOT_KEY) == before

    def test_missing_and_fetch_fails_raises(self, store: MemoryCacheStore, make_feed) -> None:
        with pytest.raises(FetchError):
            SnapshotCache(store, make_feed(error=FetchError(SYNOP_URL, "down")), serve_stale=True).ensure_snapshot()

    def test_serve_stale(self, store: MemoryCacheStore, make_feed, caplog: pytest.LogCaptureFixture) -> None:
        _store_snapshot(store, NOW - 4000)
        feed = make_feed(error=FetchError(SYNOP_URL, "down"))
        with patch("mymeteo.snapshot.time") as mock_time:
            mock_time.time.return_value = NOW
            snap = SnapshotCache(store, feed, serve_stale=True).ensure_snapshot()
        assert snap.find("old") is not None
        assert "serving data" in caplog.text

    def test_custom_ttl(self, store: MemoryCacheStore, make_feed) -> None:
        _store_snapshot(store, NOW - 61)
        feed = make_feed([])
        with patch("mymeteo.snapshot.time") as mock_time:
            mock_time.time.return_value = NOW
            SnapshotCache(store, feed, ttl=60).ensure_snapshot()
        assert feed.calls == 1

    def test_fractional_fetch_time_kept(self, store: MemoryCacheStore, make_feed) -> None:
        feed = make_feed([{"id_stacji": "new"}])
        with patch("mymeteo.snapshot.time") as mock_time:
            mock_time.time.return_value = NOW + 0.75
            snap = SnapshotCache(store, feed).ensure_snapshot()
        stored = json.loads(store.read_text(SNAPSHOT_KEY))["fetched_at"]
        assert stored == snap.fetched_at == NOW + 0.75
        assert SnapshotCache(store, feed).load() == snap

    def test_shared_download_stamped_at_fetch_time(self, store: MemoryCacheStore, make_feed, clock) -> None:
        feed = MemoizedFeed(make_feed([{"id_stacji": "new"}]))
        downloaded_at = clock.now
        with patch("mymeteo.feed.time", clock), patch("mymeteo.snapshot.time", clock):
            feed.fetch()
            clock.now += 900.0
            snap = SnapshotCache(store, feed).ensure_snapshot()
        assert snap.fetched_at == downloaded_at
        assert json.loads(store.read_text(SNAPSHOT_KEY))["fetched_at"] == downloaded_at
