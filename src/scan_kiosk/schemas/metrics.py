"""Schemas for the stats exports."""
from __future__ import annotations

from pydantic import BaseModel, Field


class DayMetrics(BaseModel):
    """One day's counters, in export column order."""

    day: str = Field(..., description="Calendar day in the kiosk timezone (YYYY-MM-DD).")
    qr_scans: int = 0
    unique_scans: int = 0
    redirects: int = 0
    revisits: int = 0

    def counters(self) -> dict[str, int]:
        """Return the four counters without the day key."""
        return self.model_dump(exclude={"day"})


class MetricsSnapshot(BaseModel):
    """JSON export of every day's counters."""

    tz: str
    days: dict[str, dict[str, int]]
