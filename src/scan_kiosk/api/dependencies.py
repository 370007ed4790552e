"""Shared API dependencies for the kiosk routes."""

import secrets
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.templating import Jinja2Templates

from scan_kiosk.core.settings import Settings, get_settings
from scan_kiosk.services.ledger import TokenLedger
from scan_kiosk.services.metrics import MetricsAggregator
from scan_kiosk.services.store import KioskStore, get_store

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[1] / "templates"))

SettingsDep = Annotated[Settings, Depends(get_settings)]
StoreDep = Annotated[KioskStore, Depends(get_store)]


def get_ledger(store: StoreDep) -> TokenLedger:
    """Return the configured token ledger."""
    return store.ledger


def get_metrics(store: StoreDep) -> MetricsAggregator:
    """Return the configured metrics aggregator."""
    return store.metrics


LedgerDep = Annotated[TokenLedger, Depends(get_ledger)]
MetricsDep = Annotated[MetricsAggregator, Depends(get_metrics)]


def require_admin(
    config: SettingsDep,
    key: Annotated[str | None, Query()] = None,
) -> None:
    """Reject the request unless it carries the shared admin key.

    When no ``ADMIN_KEY`` is configured the stats views are public.

    Raises:
        HTTPException: 401 if a key is configured and ``key`` does not match
    """
    if not config.admin_key:
        return
    if key is not None and secrets.compare_digest(key.encode(), config.admin_key.encode()):
        return
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized. Append ?key=YOUR_ADMIN_KEY to the URL.",
    )


def public_base_url(request: Request, config: Settings) -> str:
    """Return the externally visible base URL without a trailing slash."""
    if config.public_base_url:
        return config.public_base_url.rstrip("/")
    return str(request.base_url).rstrip("/")


def scan_url_for(request: Request, config: Settings, token: int) -> str:
    """Return the link a phone lands on when it scans ``token``."""
    return f"{public_base_url(request, config)}/kiosk/scan/{token}"
