# src/scan_kiosk/schemas/__init__.py
"""
Pydantic schemas for API response models.

These schemas define the structure of API data for serialization.
"""

from .kiosk import CurrentToken
from .metrics import DayMetrics, MetricsSnapshot

__all__ = ["CurrentToken", "DayMetrics", "MetricsSnapshot"]
