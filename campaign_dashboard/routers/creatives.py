"""Creative / keyword dashboards built from the spreadsheet feeds."""
import os
import time
from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from ..config import settings
from ..usage_logging import usage_logger
from ..services.export import build_dashboard_workbook
from ..services.media import MediaClient, get_media_client
from ..services.pipeline import (
    FEEDS,
    DashboardFilter,
    FeedConfig,
    UnknownFeedError,
    build_dashboard,
    get_feed,
    run_pipeline,
)
from ..services.sheets import SheetsClient, get_sheets_client
from .common import fetch_table, split_values

router = APIRouter(prefix="/creatives", tags=["creatives"])


def _feed_or_404(feed_name: str) -> FeedConfig:
    try:
        return get_feed(feed_name)
    except UnknownFeedError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown feed: {feed_name}") from exc


@router.get("/feeds")
def list_feeds():
    return {
        "feeds": [
            {"name": feed.name, "label": feed.label, "page_size": feed.page_size}
            for feed in FEEDS.values()
        ]
    }


@router.get("/{feed_name}")
async def feed_dashboard(
    feed_name: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    categories: List[str] = Query(default=[]),
    page: int = 1,
    page_size: Optional[int] = Query(default=None, ge=1, le=500),
    order: Literal["desc", "asc"] = "desc",
    with_media: bool = False,
    sheets: SheetsClient = Depends(get_sheets_client),
    media: MediaClient = Depends(get_media_client),
):
    """
    One page of the aggregated table for a feed, plus totals and the values
    needed to populate the filter controls.
    """
    started = time.time()
    feed = _feed_or_404(feed_name)
    table = await fetch_table(sheets, feed.sheet_range)

    media_map = None
    if with_media and feed.media_platform:
        media_map = await media.get_platform_media(feed.media_platform)

    filters = DashboardFilter.build(start, end, split_values(categories))
    result = build_dashboard(
        table,
        feed,
        filters,
        page=page,
        page_size=page_size,
        descending=order == "desc",
        media_map=media_map,
    )

    usage_logger.log(
        {
            "tool": f"dashboard:{feed.name}",
            "rows_processed": len(table.rows),
            "status": "success",
            "duration_ms": int((time.time() - started) * 1000),
            "app_version": settings.app_version,
            "aggregated_rows": result.total_records,
        }
    )
    return result.to_dict()


@router.get("/{feed_name}/export", response_class=FileResponse)
async def export_feed(
    feed_name: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    categories: List[str] = Query(default=[]),
    order: Literal["desc", "asc"] = "desc",
    sheets: SheetsClient = Depends(get_sheets_client),
):
    """Full filtered table (no pagination) with a totals row, as .xlsx."""
    feed = _feed_or_404(feed_name)
    table = await fetch_table(sheets, feed.sheet_range)

    filters = DashboardFilter.build(start, end, split_values(categories))
    output = run_pipeline(table, feed, filters, descending=order == "desc")

    try:
        workbook_path = build_dashboard_workbook(output.records, output.totals, feed)
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Workbook generation failed: {exc}") from exc

    dl_name = f"{feed.name}_{datetime.utcnow().strftime('%Y%m%d')}.xlsx"
    return FileResponse(
        workbook_path,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=dl_name,
        background=BackgroundTask(os.unlink, workbook_path),
    )
