"""Tests for the daily metrics aggregator and day bucketing."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.orm import Session

from scan_kiosk.db.time import day_key
from scan_kiosk.models import MetricsDay
from scan_kiosk.services.metrics import COUNTERS
from scan_kiosk.services.store import KioskStore

WORKERS = 8
INCREMENTS_PER_WORKER = 25


def test_increment_creates_day_lazily(store: KioskStore) -> None:
    """A day appears with every counter at zero except the one bumped."""
    metrics = store.metrics
    assert metrics.snapshot() == {}

    metrics.increment("redirects", day="2025-01-02")
    assert metrics.snapshot() == {
        "2025-01-02": {"qr_scans": 0, "unique_scans": 0, "redirects": 1, "revisits": 0}
    }


def test_increment_counts_exactly(store: KioskStore) -> None:
    """N increments of one counter read back as N."""
    metrics = store.metrics
    for _ in range(5):
        metrics.increment("qr_scans", day="2025-01-02")
    metrics.increment("revisits", day="2025-01-02")
    metrics.increment("qr_scans", day="2025-01-03")

    snapshot = metrics.snapshot()
    assert snapshot["2025-01-02"]["qr_scans"] == 5
    assert snapshot["2025-01-02"]["revisits"] == 1
    assert snapshot["2025-01-03"]["qr_scans"] == 1


def test_unknown_counter_is_rejected(store: KioskStore) -> None:
    """Only the four named counters exist."""
    with pytest.raises(ValueError):
        store.metrics.increment("clicks", day="2025-01-02")
    assert store.metrics.snapshot() == {}


def test_concurrent_increments_are_not_lost(store: KioskStore) -> None:
    """Interleaved increments across counters and days all land."""
    barrier = threading.Barrier(WORKERS)

    def work(worker: int) -> None:
        barrier.wait()
        for _ in range(INCREMENTS_PER_WORKER):
            store.metrics.increment("qr_scans", day="2025-06-01")
            store.metrics.increment(COUNTERS[worker % len(COUNTERS)], day="2025-06-02")

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        list(pool.map(work, range(WORKERS)))

    snapshot = store.metrics.snapshot()
    assert snapshot["2025-06-01"]["qr_scans"] == WORKERS * INCREMENTS_PER_WORKER
    per_counter = WORKERS // len(COUNTERS) * INCREMENTS_PER_WORKER
    assert snapshot["2025-06-02"] == {name: per_counter for name in COUNTERS}


def test_rows_match_snapshot_and_sort_by_day(store: KioskStore) -> None:
    """rows() and snapshot() agree and rows are ascending by day."""
    metrics = store.metrics
    for day in ("2025-03-10", "2024-12-31", "2025-01-01", "2025-03-10"):
        metrics.increment("unique_scans", day=day)

    rows = metrics.rows()
    assert [row.day for row in rows] == ["2024-12-31", "2025-01-01", "2025-03-10"]
    assert {row.day: row.counters() for row in rows} == metrics.snapshot()
    assert rows[-1].unique_scans == 2


def test_default_day_is_today_in_kiosk_zone(store: KioskStore) -> None:
    """Without an explicit day the increment lands on today's key."""
    before = day_key(tz=store.metrics.timezone)
    store.metrics.increment("qr_scans")
    after = day_key(tz=store.metrics.timezone)

    days = set(store.metrics.snapshot())
    assert len(days) == 1
    assert days <= {before, after}


class TestSqlUpdateOrInsert:
    """The UPDATE-then-INSERT path used on dialects without a native upsert."""

    def test_counts_without_native_upsert(
        self, sql_store: KioskStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The first increment inserts the day and later ones update it."""
        metrics = sql_store.metrics
        monkeypatch.setattr(metrics, "_upsert", metrics._update_or_insert)

        for _ in range(3):
            metrics.increment("qr_scans", day="2025-02-01")
        metrics.increment("revisits", day="2025-02-01")

        assert metrics.snapshot() == {
            "2025-02-01": {"qr_scans": 3, "unique_scans": 0, "redirects": 0, "revisits": 1}
        }

    def test_insert_race_retries_as_update(
        self, sql_store: KioskStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Losing the INSERT to another writer still records our increment."""
        metrics = sql_store.metrics
        calls = []

        def racing_insert(session: Session, counter: str, key: str) -> None:
            calls.append(key)
            # Another writer creates the row after our UPDATE matched nothing.
            with metrics._session_factory.begin() as other:
                other.add(
                    MetricsDay(day=key, qr_scans=1, unique_scans=0, redirects=0, revisits=0)
                )
            session.add(
                MetricsDay(day=key, qr_scans=1, unique_scans=0, redirects=0, revisits=0)
            )

        monkeypatch.setattr(metrics, "_upsert", racing_insert)
        metrics.increment("qr_scans", day="2025-02-01")

        assert calls == ["2025-02-01"]
        assert metrics.snapshot()["2025-02-01"]["qr_scans"] == 2


class TestDayKey:
    """Calendar-day bucketing in a fixed zone."""

    def test_midnight_boundary_in_brisbane(self) -> None:
        """23:59:59 and 00:00:01 Brisbane time fall on different days."""
        # Brisbane is UTC+10 with no daylight saving.
        late = datetime(2024, 3, 1, 13, 59, 59, tzinfo=UTC)
        early = late + timedelta(seconds=2)
        assert day_key(late, "Australia/Brisbane") == "2024-03-01"
        assert day_key(early, "Australia/Brisbane") == "2024-03-02"

    def test_naive_moment_is_utc(self) -> None:
        """Naive datetimes are read as UTC, not as host-local time."""
        assert day_key(datetime(2024, 3, 1, 14, 0, 0), "Australia/Brisbane") == "2024-03-02"

    def test_host_timezone_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Changing the process TZ does not move the bucket."""
        moment = datetime(2024, 7, 1, 13, 30, tzinfo=UTC)
        expected = day_key(moment, "Australia/Brisbane")
        monkeypatch.setenv("TZ", "America/Los_Angeles")
        if hasattr(time, "tzset"):
            time.tzset()
        try:
            assert day_key(moment, "Australia/Brisbane") == expected == "2024-07-01"
        finally:
            monkeypatch.undo()
            if hasattr(time, "tzset"):
                time.tzset()
