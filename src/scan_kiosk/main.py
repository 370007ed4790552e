# src/scan_kiosk/main.py
"""Main entry point for the kiosk scan service."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from scan_kiosk.api import kiosk_router, scan_router, stats_router
from scan_kiosk.api.dependencies import StoreDep
from scan_kiosk.core.logging import configure_logging
from scan_kiosk.core.settings import settings
from scan_kiosk.services.errors import StorageError
from scan_kiosk.services.scan import InvalidTokenError

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Single-use QR tokens for a kiosk poster, with daily scan counters",
    version=settings.app_version,
)

app.include_router(kiosk_router)
app.include_router(scan_router)
app.include_router(stats_router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    """Render HTTP errors as plain text."""
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(InvalidTokenError)
async def invalid_token_handler(request: Request, exc: InvalidTokenError) -> PlainTextResponse:
    """Reject malformed scan tokens."""
    return PlainTextResponse("Invalid token.", status_code=400)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> PlainTextResponse:
    """Fail the request when the backing store is unavailable."""
    logger.error("Storage failure on %s: %s", request.url.path, exc, exc_info=exc)
    return PlainTextResponse("Storage unavailable, please try again.", status_code=503)


@app.on_event("startup")
async def on_startup() -> None:
    logger.info(
        "%s %s starting with %s backend",
        settings.app_name,
        settings.app_version,
        settings.backend_name,
    )


@app.get("/health")
async def health_check(store: StoreDep) -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok", "backend": store.backend}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the service."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "poster": "/kiosk",
        "stats": "/kiosk/stats",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("scan_kiosk.main:app", host="0.0.0.0", port=3030, reload=settings.debug)
