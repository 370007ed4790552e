"""HTTP routes for the kiosk service."""

from .endpoints import kiosk_router, scan_router, stats_router

__all__ = ["kiosk_router", "scan_router", "stats_router"]
