"""Tabular exports of the daily counters."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable

from scan_kiosk.schemas.metrics import DayMetrics

CSV_HEADER = ("day", "total_scans", "unique_scans", "redirects", "revisits")


def metrics_to_csv(rows: Iterable[DayMetrics]) -> str:
    """Render rows as CSV in the fixed export column order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow([row.day, row.qr_scans, row.unique_scans, row.redirects, row.revisits])
    return buffer.getvalue()
