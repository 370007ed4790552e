"""Scan-landing endpoint: the URL encoded in the poster's QR code."""

from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from scan_kiosk.api.dependencies import (
    NO_STORE_HEADERS,
    LedgerDep,
    MetricsDep,
    SettingsDep,
    templates,
)
from scan_kiosk.services.scan import ScanOutcome, process_scan

router = APIRouter(prefix="/kiosk", tags=["scan"])


@router.get("/scan/{token}", response_class=HTMLResponse)
async def scan_token(
    token: str,
    request: Request,
    ledger: LedgerDep,
    metrics: MetricsDep,
    config: SettingsDep,
) -> Response:
    """Redeem a scanned token.

    The first scan of a token redirects to the game; every later scan of
    the same token gets a 410 page. Neither response may be cached.

    Args:
        token: Raw path segment; must be a non-negative integer
        request: Incoming request
        ledger: Token ledger
        metrics: Metrics aggregator
        config: Application settings

    Returns:
        A temporary redirect or the "already used" page
    """
    result = process_scan(token, ledger, metrics)

    if result.outcome is ScanOutcome.ALREADY_USED:
        return templates.TemplateResponse(
            request,
            "already_used.html",
            {
                "app_name": config.app_name,
                "token": result.token,
                "consumed_at": ledger.get_consumed_at(result.token),
            },
            status_code=status.HTTP_410_GONE,
            headers=NO_STORE_HEADERS,
        )

    return RedirectResponse(
        config.game_target(result.token),
        status_code=status.HTTP_302_FOUND,
        headers=NO_STORE_HEADERS,
    )
