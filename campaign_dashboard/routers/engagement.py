"""Event ranking and traffic & engagement summaries from the GA4 sheets."""
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..config import settings
from ..usage_logging import usage_logger
from ..services.events import (
    REGION_HEADERS,
    SOURCE_HEADERS,
    count_events,
    cta_summary,
    distinct_values,
    modality_values,
    rank_event_categories,
    sessions_by_source,
)
from ..services.pipeline import DateRange
from ..services.sheets import SheetsClient, get_sheets_client
from .common import fetch_table, split_values

router = APIRouter(tags=["engagement"])

EVENTS_RANGE = "Eventos_Receptivos"
GA4_RANGE = "GA4_receptivos"


def _date_range(start: Optional[str], end: Optional[str]) -> DateRange:
    return DateRange(start=start or None, end=end or None)


@router.get("/events/ranking")
async def events_ranking(
    start: Optional[str] = None,
    end: Optional[str] = None,
    modalities: List[str] = Query(default=[]),
    sheets: SheetsClient = Depends(get_sheets_client),
):
    started = time.time()
    table = await fetch_table(sheets, EVENTS_RANGE)

    counts = count_events(
        table,
        _date_range(start, end),
        split_values(modalities),
        cutoff=settings.whatsapp_cutoff_date,
    )

    usage_logger.log(
        {
            "tool": "events:ranking",
            "rows_processed": len(table.rows),
            "status": "success",
            "duration_ms": int((time.time() - started) * 1000),
            "app_version": settings.app_version,
        }
    )
    return {
        "categories": rank_event_categories(counts),
        "counts": counts,
        "available_modalities": modality_values(table),
        "cutoff": settings.whatsapp_cutoff_date,
    }


@router.get("/traffic/sessions")
async def traffic_sessions(
    start: Optional[str] = None,
    end: Optional[str] = None,
    sources: List[str] = Query(default=[]),
    regions: List[str] = Query(default=[]),
    sheets: SheetsClient = Depends(get_sheets_client),
):
    started = time.time()
    ga4_table = await fetch_table(sheets, GA4_RANGE)
    events_table = await fetch_table(sheets, EVENTS_RANGE)

    date_range = _date_range(start, end)
    selected_sources = split_values(sources)
    selected_regions = split_values(regions)

    result = sessions_by_source(ga4_table, date_range, selected_sources, selected_regions)
    result["ctas"] = cta_summary(events_table, ga4_table, date_range, selected_sources, selected_regions)
    result["available_sources"] = distinct_values(ga4_table, SOURCE_HEADERS)
    result["available_regions"] = distinct_values(ga4_table, REGION_HEADERS)

    usage_logger.log(
        {
            "tool": "traffic:sessions",
            "rows_processed": len(ga4_table.rows) + len(events_table.rows),
            "status": "success",
            "duration_ms": int((time.time() - started) * 1000),
            "app_version": settings.app_version,
        }
    )
    return result
