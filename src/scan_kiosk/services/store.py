"""Backend selection for the ledger and the metrics aggregator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError

from scan_kiosk.core.settings import Settings, settings
from scan_kiosk.db.session import create_db_engine, create_session_factory, create_tables
from scan_kiosk.services.errors import StorageError
from scan_kiosk.services.ledger import FileTokenLedger, SqlTokenLedger, TokenLedger
from scan_kiosk.services.metrics import (
    FileMetricsAggregator,
    MetricsAggregator,
    SqlMetricsAggregator,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KioskStore:
    """A ledger and an aggregator of the same backend kind."""

    backend: str
    ledger: TokenLedger
    metrics: MetricsAggregator


def build_file_store(config: Settings) -> KioskStore:
    """Build the JSON-file backend rooted at ``config.data_dir``."""
    ledger = FileTokenLedger(config.data_dir, seed=config.token_seed)
    metrics = FileMetricsAggregator(config.data_dir, timezone=config.kiosk_timezone)
    return KioskStore(backend="file", ledger=ledger, metrics=metrics)


def build_sql_store(config: Settings) -> KioskStore:
    """Build the relational backend, creating tables and the seed row if missing."""
    url = config.sqlalchemy_database_url
    if url is None:
        raise ValueError("DATABASE_URL is not configured")
    engine = create_db_engine(url, echo=config.sql_debug)
    try:
        create_tables(engine)
    except SQLAlchemyError as exc:
        raise StorageError(f"Cannot initialise database schema: {exc}") from exc
    session_factory = create_session_factory(engine)
    ledger = SqlTokenLedger(session_factory, seed=config.token_seed)
    ledger.ensure_seeded()
    metrics = SqlMetricsAggregator(session_factory, timezone=config.kiosk_timezone)
    return KioskStore(backend="sql", ledger=ledger, metrics=metrics)


def build_store(config: Settings) -> KioskStore:
    """Select the backend from configuration; called once per process."""
    store = build_sql_store(config) if config.database_url else build_file_store(config)
    logger.info(
        "Using %s backend (timezone %s)", store.backend, config.kiosk_timezone
    )
    return store


@lru_cache(maxsize=1)
def get_store() -> KioskStore:
    """Return the process-wide store built from the global settings."""
    return build_store(settings)
