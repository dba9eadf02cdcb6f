"""Helpers shared by the dashboard routers."""
from __future__ import annotations

import logging
from typing import Iterable

from fastapi import HTTPException

from ..services.pipeline.table import RawTable
from ..services.sheets import SheetsClient, SheetsConfigurationError, SheetsFetchError

logger = logging.getLogger(__name__)


async def fetch_table(sheets: SheetsClient, range_name: str, *, spreadsheet_id: str | None = None) -> RawTable:
    """Fetch a sheet range, turning transport failures into HTTP errors the UI can show."""
    try:
        return await sheets.fetch_range(range_name, spreadsheet_id=spreadsheet_id)
    except SheetsConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except SheetsFetchError as exc:
        logger.warning("Fetching %s failed: %s", range_name, exc)
        raise HTTPException(status_code=502, detail=f"Could not load {range_name}: {exc}") from exc


def split_values(values: Iterable[str] | None) -> list[str]:
    """Accept both repeated query params and comma-separated lists."""
    out: list[str] = []
    for value in values or ():
        out.extend(part.strip() for part in str(value).split(",") if part.strip())
    return out
