"""Session and CTA summaries for the traffic & engagement page (GA4 sheets)."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from ..pipeline.columns import NOT_FOUND, resolve_any, resolve_column
from ..pipeline.filters import DateRange
from ..pipeline.normalize import normalize_date, parse_integer
from ..pipeline.table import RawTable

logger = logging.getLogger(__name__)

OTHER = "Outros"

SOURCE_HEADERS = ("Session source", "Session manual source")
# the filter column is called "Origem" in some exports
SOURCE_FILTER_HEADERS = ("Origem",) + SOURCE_HEADERS
REGION_HEADERS = ("Region",)
NEW_USERS_HEADERS = ("New users", "Novos usuários", "First visit", "First visits")

PLATFORM_COLORS = {
    "meta": "#1877f2",
    "facebook": "#1877f2",
    "instagram": "#E4405F",
    "tiktok": "#ff0050",
    "youtube": "#ff0000",
    "google": "#4285f4",
    "criteo": "#ff6900",
    "dms-social": "#1877f2",
    "dms-google": "#4285f4",
    "dms-youtube": "#ff0000",
    "organic": "#6b7280",
    "(not set)": "#9ca3af",
    "outros": "#9ca3af",
}
DEFAULT_COLOR = "#6b7280"

REGION_NAMES = {
    "Ceara": "Ceará",
    "Federal District": "Distrito Federal",
    "State of Acre": "Acre",
    "State of Alagoas": "Alagoas",
    "State of Amapa": "Amapá",
    "State of Amazonas": "Amazonas",
    "State of Bahia": "Bahia",
    "State of Espirito Santo": "Espírito Santo",
    "State of Goias": "Goiás",
    "State of Maranhao": "Maranhão",
    "State of Mato Grosso": "Mato Grosso",
    "State of Mato Grosso do Sul": "Mato Grosso do Sul",
    "State of Minas Gerais": "Minas Gerais",
    "State of Para": "Pará",
    "State of Paraiba": "Paraíba",
    "State of Parana": "Paraná",
    "State of Pernambuco": "Pernambuco",
    "State of Piaui": "Piauí",
    "State of Rio de Janeiro": "Rio de Janeiro",
    "State of Rio Grande do Norte": "Rio Grande do Norte",
    "State of Rio Grande do Sul": "Rio Grande do Sul",
    "State of Rondonia": "Rondônia",
    "State of Roraima": "Roraima",
    "State of Santa Catarina": "Santa Catarina",
    "State of Sao Paulo": "São Paulo",
    "State of Sergipe": "Sergipe",
    "State of Tocantins": "Tocantins",
    "Upper Takutu-Upper Essequibo": OTHER,
}


def platform_color(source: str) -> str:
    return PLATFORM_COLORS.get(str(source).lower(), DEFAULT_COLOR)


def normalize_region(name: Any) -> str:
    """GA4 region name → Brazilian state name; unknown names pass through."""
    text = str(name or "").strip()
    return REGION_NAMES.get(text, text)


class _RowFilter:
    """Date, source and region predicates; a selection on a missing column passes everything."""

    def __init__(
        self,
        headers: Sequence[Any],
        date_range: DateRange | None,
        sources: Iterable[str],
        regions: Iterable[str],
    ) -> None:
        self.date_idx = resolve_column(headers, "Date")
        self.source_idx = resolve_any(headers, SOURCE_FILTER_HEADERS)
        self.region_idx = resolve_any(headers, REGION_HEADERS)
        self.date_range = date_range or DateRange()
        self.sources = {s for s in sources if s}
        self.regions = {r for r in regions if r}

    def accepts(self, table: RawTable, row: Sequence[Any]) -> bool:
        if not self.date_range.contains(table.cell(row, self.date_idx)):
            return False
        if self.sources and self.source_idx != NOT_FOUND:
            if str(table.cell(row, self.source_idx) or "").strip() not in self.sources:
                return False
        if self.regions and self.region_idx != NOT_FOUND:
            if str(table.cell(row, self.region_idx) or "").strip() not in self.regions:
                return False
        return True


def distinct_values(table: RawTable, names: Sequence[str]) -> list[str]:
    idx = resolve_any(table.headers, names)
    if idx == NOT_FOUND:
        return []
    values = {str(table.cell(r, idx) or "").strip() for r in table.rows}
    return sorted(v for v in values if v)


def sessions_by_source(
    table: RawTable,
    date_range: DateRange | None = None,
    sources: Iterable[str] = (),
    regions: Iterable[str] = (),
) -> dict[str, Any]:
    """Sessions per platform (with share of total), per region and per day."""
    empty = {"platforms": [], "regions": [], "total_sessions": 0, "sessions_by_date": {}}

    headers = table.headers
    date_idx = resolve_column(headers, "Date")
    platform_idx = resolve_any(headers, SOURCE_HEADERS)
    sessions_idx = resolve_column(headers, "Sessions")
    region_idx = resolve_any(headers, REGION_HEADERS)

    if NOT_FOUND in (date_idx, platform_idx, sessions_idx):
        if headers:
            logger.warning("GA4 sheet is missing Date / Session source / Sessions: %s", list(headers)[:15])
        return empty

    row_filter = _RowFilter(headers, date_range, sources, regions)
    per_platform: dict[str, int] = {}
    per_region: dict[str, int] = {}
    per_date: dict[str, int] = {}
    total = 0

    for row in table.rows:
        if not row_filter.accepts(table, row):
            continue
        sessions = parse_integer(table.cell(row, sessions_idx))
        if sessions <= 0:
            continue
        platform = str(table.cell(row, platform_idx) or "").strip() or OTHER

        total += sessions
        per_platform[platform] = per_platform.get(platform, 0) + sessions

        if region_idx != NOT_FOUND:
            region = normalize_region(table.cell(row, region_idx)) or OTHER
            per_region[region] = per_region.get(region, 0) + sessions

        raw_date = table.cell(row, date_idx)
        if raw_date:
            day = normalize_date(raw_date) or str(raw_date).strip()
            per_date[day] = per_date.get(day, 0) + sessions

    platforms = [
        {
            "platform": name,
            "sessions": count,
            "share": (count / total) * 100 if total > 0 else 0.0,
            "color": platform_color(name),
        }
        for name, count in per_platform.items()
    ]
    platforms.sort(key=lambda p: p["sessions"], reverse=True)

    regions_out = [{"region": name, "sessions": count} for name, count in per_region.items()]
    regions_out.sort(key=lambda r: r["sessions"], reverse=True)

    return {
        "platforms": platforms,
        "regions": regions_out,
        "total_sessions": total,
        "sessions_by_date": dict(sorted(per_date.items())),
    }


def cta_summary(
    events_table: RawTable,
    ga4_table: RawTable,
    date_range: DateRange | None = None,
    sources: Iterable[str] = (),
    regions: Iterable[str] = (),
) -> dict[str, int]:
    """`botao-cta` clicks from the events sheet plus new users from the GA4 sheet."""
    sources = list(sources)
    regions = list(regions)

    bb_track = 0
    headers = events_table.headers
    name_idx = resolve_column(headers, "Event name")
    count_idx = resolve_column(headers, "Event count")
    if NOT_FOUND in (resolve_column(headers, "Date"), name_idx, count_idx):
        if headers:
            logger.warning("Event sheet is missing Date / Event name / Event count: %s", list(headers)[:15])
    else:
        # the events sheet has no source column, so only date and region apply
        row_filter = _RowFilter(headers, date_range, (), regions)
        for row in events_table.rows:
            if not row_filter.accepts(events_table, row):
                continue
            if str(events_table.cell(row, name_idx) or "").strip() == "botao-cta":
                bb_track += parse_integer(events_table.cell(row, count_idx))

    first_visit = 0
    ga4_headers = ga4_table.headers
    new_users_idx = resolve_any(ga4_headers, NEW_USERS_HEADERS)
    if resolve_column(ga4_headers, "Date") == NOT_FOUND or new_users_idx == NOT_FOUND:
        if ga4_headers:
            logger.warning("GA4 sheet has no New users column: %s", list(ga4_headers)[:15])
    else:
        row_filter = _RowFilter(ga4_headers, date_range, sources, regions)
        for row in ga4_table.rows:
            if row_filter.accepts(ga4_table, row):
                first_visit += parse_integer(ga4_table.cell(row, new_users_idx))

    return {
        "bb_track": bb_track,
        "first_visit": first_visit,
        "total_ctas": bb_track + first_visit,
    }
