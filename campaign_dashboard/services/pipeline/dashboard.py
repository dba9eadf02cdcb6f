"""Runs the full resolve → normalize → filter → aggregate → derive → sort → page pipeline."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

import pandas as pd

from ..media import find_media_for_creative
from .aggregate import aggregate
from .columns import NOT_FOUND, build_column_map, missing_fields
from .feeds import FeedConfig
from .filters import DateRange, available_categories, filter_records, observed_date_range
from .metrics import compute_totals, derive_metrics, sort_records
from .normalize import normalize_rows
from .paginate import display_total_pages, paginate
from .table import RawTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardFilter:
    date_range: DateRange = field(default_factory=DateRange)
    categories: frozenset[str] = frozenset()

    @classmethod
    def build(
        cls,
        start: str | None = None,
        end: str | None = None,
        categories: Iterable[str] | None = None,
    ) -> "DashboardFilter":
        return cls(
            date_range=DateRange(start=start or None, end=end or None),
            categories=frozenset(c.strip() for c in (categories or ()) if c and c.strip()),
        )


@dataclass
class PipelineOutput:
    """Filtered, aggregated and sorted records before pagination."""

    records: pd.DataFrame
    totals: dict[str, Any]
    date_range: DateRange
    available_categories: list[str]


@dataclass
class DashboardResult:
    records: list[dict[str, Any]]
    totals: dict[str, Any]
    total_records: int
    total_pages: int
    page: int
    page_size: int
    date_range: DateRange
    available_categories: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": self.records,
            "totals": self.totals,
            "total_records": self.total_records,
            "total_pages": self.total_pages,
            "page": self.page,
            "page_size": self.page_size,
            "date_range": self.date_range.to_dict(),
            "available_categories": self.available_categories,
        }


def prepare_records(table: RawTable, feed: FeedConfig) -> tuple[pd.DataFrame, dict[str, int]]:
    """Resolve columns once and normalize every row of the table."""
    column_map = build_column_map(table.headers, feed.synonyms, exact_only=feed.exact_headers)
    if column_map.get(feed.identity_field, NOT_FOUND) == NOT_FOUND and table.headers:
        logger.warning(
            "Feed %s: identity column %s not found in headers %s",
            feed.name,
            feed.identity_field,
            list(table.headers)[:15],
        )
    missing = missing_fields(column_map)
    if missing:
        logger.debug("Feed %s: columns not found, using defaults: %s", feed.name, missing)

    records = normalize_rows(
        table,
        feed.fields,
        required=feed.required_fields,
        column_map=column_map,
    )
    if feed.only_identity:
        records = records[records[feed.identity_field] == feed.only_identity].reset_index(drop=True)
    return records, column_map


def run_pipeline(
    table: RawTable,
    feed: FeedConfig,
    filters: DashboardFilter | None = None,
    *,
    descending: bool = True,
) -> PipelineOutput:
    filters = filters or DashboardFilter()
    records, column_map = prepare_records(table, feed)

    classify = feed.classify
    if classify is not None and feed.category_field:
        if column_map.get(feed.category_field, NOT_FOUND) == NOT_FOUND:
            classify = None

    filtered = filter_records(
        records,
        filters.date_range,
        filters.categories,
        classify,
        date_field=feed.date_field,
    )
    grouped = aggregate(filtered, feed.key_fn, feed.additive_fields)
    derived = derive_metrics(
        grouped,
        cpc_clicks_field=feed.cpc_clicks_field,
        ctr_clicks_field=feed.ctr_clicks_field,
    )
    ordered = sort_records(derived, feed.sort_field, descending)
    totals = compute_totals(
        ordered,
        feed.additive_fields,
        cpc_clicks_field=feed.cpc_clicks_field,
        ctr_clicks_field=feed.ctr_clicks_field,
    )

    return PipelineOutput(
        records=ordered,
        totals=totals,
        date_range=observed_date_range(records, feed.date_field),
        available_categories=available_categories(records, classify),
    )


def build_dashboard(
    table: RawTable,
    feed: FeedConfig,
    filters: DashboardFilter | None = None,
    *,
    page: int = 1,
    page_size: int | None = None,
    descending: bool = True,
    media_map: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> DashboardResult:
    """
    Display-ready page for one feed.

    `date_range` in the result is the window observed in the data (the default
    filter), not the filter that was applied.
    """
    output = run_pipeline(table, feed, filters, descending=descending)
    size = page_size or feed.page_size

    rows = paginate(output.records, page, size).to_dict(orient="records")
    if media_map is not None:
        for row in rows:
            row["media"] = find_media_for_creative(row.get(feed.identity_field), media_map)

    return DashboardResult(
        records=rows,
        totals=output.totals,
        total_records=len(output.records),
        total_pages=display_total_pages(len(output.records), size),
        page=page,
        page_size=size,
        date_range=output.date_range,
        available_categories=output.available_categories,
    )
