# src/scan_kiosk/models/metrics.py
"""Per-day usage counters."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from scan_kiosk.db.session import Base


class MetricsDay(Base):
    """Counters for one calendar day in the kiosk's timezone."""

    __tablename__ = "metrics_day"

    # YYYY-MM-DD, kept as text so no driver applies a timezone shift.
    day: Mapped[str] = mapped_column(String(10), primary_key=True)
    qr_scans: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    unique_scans: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    redirects: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    revisits: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
