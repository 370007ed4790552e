"""Schemas for the poster polling endpoint."""
from __future__ import annotations

from pydantic import BaseModel


class CurrentToken(BaseModel):
    """The token on display, the link it encodes and its QR image."""

    token: int
    target_url: str
    qr_data_url: str
