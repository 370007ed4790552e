"""Per-day usage counters bucketed by the kiosk's timezone."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from scan_kiosk.db.time import day_key
from scan_kiosk.models import MetricsDay
from scan_kiosk.schemas.metrics import DayMetrics
from scan_kiosk.services.errors import StorageError
from scan_kiosk.services.json_store import JsonDocument

logger = logging.getLogger(__name__)

COUNTERS: tuple[str, ...] = ("qr_scans", "unique_scans", "redirects", "revisits")
METRICS_FILE_NAME = "metrics.json"


def _check_counter(counter: str) -> None:
    if counter not in COUNTERS:
        raise ValueError(f"Unknown counter {counter!r}; expected one of {COUNTERS}")


def _empty_day() -> dict[str, int]:
    return {name: 0 for name in COUNTERS}


class MetricsAggregator(Protocol):
    """Capabilities shared by every metrics backend."""

    timezone: str

    def increment(self, counter: str, day: str | None = None) -> None:
        """Add one to ``counter`` for ``day`` (today when omitted)."""
        ...

    def snapshot(self) -> dict[str, dict[str, int]]:
        """Return every day's counters keyed by day."""
        ...

    def rows(self) -> list[DayMetrics]:
        """Return one row per day, ascending by day."""
        ...


class FileMetricsAggregator:
    """Counters held in memory and persisted to ``metrics.json``."""

    def __init__(self, data_dir: Path, timezone: str) -> None:
        self.timezone = timezone
        self._doc = JsonDocument(
            Path(data_dir) / METRICS_FILE_NAME,
            default=lambda: {"tz": timezone, "days": {}},
        )
        self._doc.data.setdefault("days", {})
        stored_tz = self._doc.data.get("tz")
        if stored_tz and stored_tz != timezone:
            logger.warning(
                "metrics.json was written for timezone %s, now bucketing by %s",
                stored_tz,
                timezone,
            )

    @property
    def path(self) -> Path:
        return self._doc.path

    def increment(self, counter: str, day: str | None = None) -> None:
        _check_counter(counter)
        key = day or day_key(tz=self.timezone)
        with self._doc.lock:
            days: dict[str, dict[str, int]] = self._doc.data["days"]
            created = key not in days
            record = days.setdefault(key, _empty_day())
            record[counter] = int(record.get(counter, 0)) + 1
            try:
                self._doc.save()
            except StorageError:
                if created:
                    del days[key]
                else:
                    record[counter] -= 1
                raise

    def snapshot(self) -> dict[str, dict[str, int]]:
        with self._doc.lock:
            days = self._doc.data["days"]
            return {
                key: {name: int(days[key].get(name, 0)) for name in COUNTERS}
                for key in sorted(days)
            }

    def rows(self) -> list[DayMetrics]:
        return [DayMetrics(day=key, **counts) for key, counts in self.snapshot().items()]


class SqlMetricsAggregator:
    """Counters stored in the ``metrics_day`` table, one row per day.

    Increments are a single upsert statement on PostgreSQL and SQLite, so
    concurrent requests never lose an update.
    """

    def __init__(self, session_factory: sessionmaker, timezone: str) -> None:
        self._session_factory = session_factory
        self.timezone = timezone

    def _upsert(self, session: Session, counter: str, key: str) -> None:
        dialect = session.get_bind().dialect.name
        column = getattr(MetricsDay, counter)
        if dialect == "postgresql":
            insert_fn = postgresql.insert
        elif dialect == "sqlite":
            insert_fn = sqlite.insert
        else:
            self._update_or_insert(session, counter, key)
            return
        values = _empty_day()
        values[counter] = 1
        stmt = insert_fn(MetricsDay).values(day=key, **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[MetricsDay.day],
            set_={counter: column + 1},
        )
        session.execute(stmt)

    def _update_or_insert(self, session: Session, counter: str, key: str) -> None:
        column = getattr(MetricsDay, counter)
        result = session.execute(
            update(MetricsDay).where(MetricsDay.day == key).values({counter: column + 1})
        )
        if result.rowcount:
            return
        values = _empty_day()
        values[counter] = 1
        session.add(MetricsDay(day=key, **values))

    def increment(self, counter: str, day: str | None = None) -> None:
        _check_counter(counter)
        key = day or day_key(tz=self.timezone)
        try:
            with self._session_factory.begin() as session:
                self._upsert(session, counter, key)
        except IntegrityError:
            # Generic path only: another writer created the row between our
            # UPDATE and INSERT, so the plain UPDATE now matches.
            try:
                with self._session_factory.begin() as session:
                    self._update_or_insert(session, counter, key)
            except SQLAlchemyError as exc:
                raise StorageError(f"Cannot increment {counter} for {key}: {exc}") from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot increment {counter} for {key}: {exc}") from exc

    def rows(self) -> list[DayMetrics]:
        try:
            with self._session_factory() as session:
                records = session.scalars(select(MetricsDay).order_by(MetricsDay.day)).all()
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot read metrics: {exc}") from exc
        return [
            DayMetrics(
                day=record.day,
                qr_scans=record.qr_scans or 0,
                unique_scans=record.unique_scans or 0,
                redirects=record.redirects or 0,
                revisits=record.revisits or 0,
            )
            for record in records
        ]

    def snapshot(self) -> dict[str, dict[str, int]]:
        return {row.day: row.counters() for row in self.rows()}
