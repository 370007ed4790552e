"""Poster endpoints: the page on the kiosk screen and its QR image."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, Response

from scan_kiosk.api.dependencies import (
    NO_STORE_HEADERS,
    LedgerDep,
    SettingsDep,
    scan_url_for,
    templates,
)
from scan_kiosk.schemas.kiosk import CurrentToken
from scan_kiosk.services.qr import make_qr_data_url, make_qr_png

router = APIRouter(prefix="/kiosk", tags=["kiosk"])


@router.get("", response_class=HTMLResponse)
async def poster(request: Request, ledger: LedgerDep, config: SettingsDep) -> Response:
    """Render the poster with a QR code for the current token."""
    token = ledger.get_current_token()
    target_url = scan_url_for(request, config, token)
    return templates.TemplateResponse(
        request,
        "poster.html",
        {
            "app_name": config.app_name,
            "token": token,
            "target_url": target_url,
            "qr_data_url": make_qr_data_url(target_url),
            "refresh_ms": config.poster_refresh_seconds * 1000,
        },
        headers=NO_STORE_HEADERS,
    )


@router.get("/current", response_model=CurrentToken)
async def current_token(
    request: Request, response: Response, ledger: LedgerDep, config: SettingsDep
) -> CurrentToken:
    """Return the token on display for client-side refresh of the poster."""
    token = ledger.get_current_token()
    target_url = scan_url_for(request, config, token)
    response.headers.update(NO_STORE_HEADERS)
    return CurrentToken(
        token=token,
        target_url=target_url,
        qr_data_url=make_qr_data_url(target_url),
    )


@router.get("/qr.png")
async def poster_qr_png(request: Request, ledger: LedgerDep, config: SettingsDep) -> Response:
    """Return the current token's QR code as a PNG for printing."""
    token = ledger.get_current_token()
    png = make_qr_png(scan_url_for(request, config, token))
    headers = dict(NO_STORE_HEADERS)
    headers["Content-Disposition"] = 'inline; filename="kiosk-qr.png"'
    return Response(content=png, media_type="image/png", headers=headers)
