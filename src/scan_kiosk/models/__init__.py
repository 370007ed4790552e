# src/scan_kiosk/models/__init__.py
"""SQLAlchemy models for the kiosk service."""

from .metrics import MetricsDay
from .token import TOKEN_POINTER_ID, ConsumedToken, TokenPointer

__all__ = [
    "ConsumedToken",
    "MetricsDay",
    "TOKEN_POINTER_ID",
    "TokenPointer",
]
