"""Read-only stats views, gated by the shared admin key."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response

from scan_kiosk.api.dependencies import MetricsDep, SettingsDep, require_admin, templates
from scan_kiosk.schemas.metrics import MetricsSnapshot
from scan_kiosk.services.export import metrics_to_csv

router = APIRouter(
    prefix="/kiosk",
    tags=["stats"],
    dependencies=[Depends(require_admin)],
)


@router.get("/stats", response_class=HTMLResponse)
async def stats_page(request: Request, metrics: MetricsDep, config: SettingsDep) -> Response:
    """Render the daily counters as an HTML table."""
    return templates.TemplateResponse(
        request,
        "stats.html",
        {
            "app_name": config.app_name,
            "timezone": metrics.timezone,
            "rows": metrics.rows(),
            "key": request.query_params.get("key"),
        },
    )


@router.get("/stats.json", response_model=MetricsSnapshot)
async def stats_json(metrics: MetricsDep) -> MetricsSnapshot:
    """Return every day's counters keyed by day."""
    return MetricsSnapshot(tz=metrics.timezone, days=metrics.snapshot())


@router.get("/stats.csv")
async def stats_csv(metrics: MetricsDep) -> Response:
    """Return the daily counters as CSV."""
    return Response(
        content=metrics_to_csv(metrics.rows()),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="kiosk-stats.csv"'},
    )
