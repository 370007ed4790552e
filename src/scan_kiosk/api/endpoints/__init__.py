# src/scan_kiosk/api/endpoints/__init__.py
"""API endpoint modules."""

from .kiosk import router as kiosk_router
from .scan import router as scan_router
from .stats import router as stats_router

__all__ = ["kiosk_router", "scan_router", "stats_router"]
