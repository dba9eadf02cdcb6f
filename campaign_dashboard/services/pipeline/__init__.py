"""Spreadsheet-to-metrics pipeline shared by every dashboard feed."""

from .table import RawTable
from .columns import NOT_FOUND, resolve_column, resolve_any, find_containing, build_column_map
from .normalize import FieldSpec, parse_number, parse_integer, normalize_date, normalize_rows
from .filters import (
    DateRange,
    detect_modality,
    by_modality,
    filter_records,
    available_categories,
    observed_date_range,
)
from .aggregate import aggregate, by_field, by_fields, by_folded_field
from .metrics import derive_metrics, sort_records, compute_totals
from .paginate import paginate, total_pages, display_total_pages
from .feeds import FeedConfig, FEEDS, UnknownFeedError, get_feed
from .dashboard import DashboardFilter, DashboardResult, build_dashboard, run_pipeline

__all__ = [
    "RawTable",
    "NOT_FOUND",
    "resolve_column",
    "resolve_any",
    "find_containing",
    "build_column_map",
    "FieldSpec",
    "parse_number",
    "parse_integer",
    "normalize_date",
    "normalize_rows",
    "DateRange",
    "detect_modality",
    "by_modality",
    "filter_records",
    "available_categories",
    "observed_date_range",
    "aggregate",
    "by_field",
    "by_fields",
    "by_folded_field",
    "derive_metrics",
    "sort_records",
    "compute_totals",
    "paginate",
    "total_pages",
    "display_total_pages",
    "FeedConfig",
    "FEEDS",
    "UnknownFeedError",
    "get_feed",
    "DashboardFilter",
    "DashboardResult",
    "build_dashboard",
    "run_pipeline",
]
