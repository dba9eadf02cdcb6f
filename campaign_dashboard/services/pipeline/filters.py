"""Date-range and category filtering over normalized records."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

import pandas as pd

from .normalize import normalize_date

Classifier = Callable[[Mapping[str, Any]], Optional[str]]

# Checked in this order: "empresarial" names often also mention "residencial"
MODALITY_KEYWORDS = ("empresarial", "residencial", "vida")


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date window. Either bound empty means no date filtering."""

    start: str | None = None
    end: str | None = None

    @property
    def is_active(self) -> bool:
        return bool(self.start) and bool(self.end)

    def contains(self, value: Any) -> bool:
        if not self.is_active:
            return True
        day = normalize_date(value)
        if day is None:
            # unparseable dates are shown rather than hidden
            return True
        start = normalize_date(self.start) or str(self.start)
        end = normalize_date(self.end) or str(self.end)
        return start <= day <= end

    def to_dict(self) -> dict[str, str | None]:
        return {"start": self.start, "end": self.end}


def detect_modality(name: Any) -> str | None:
    if not name:
        return None
    lowered = str(name).lower()
    for keyword in MODALITY_KEYWORDS:
        if keyword in lowered:
            return keyword
    return None


def by_modality(field: str) -> Classifier:
    """Classify a record by the insurance line mentioned in one of its text fields."""

    def classify(record: Mapping[str, Any]) -> str | None:
        return detect_modality(record.get(field))

    return classify


def _categories(records: pd.DataFrame, classify: Classifier) -> pd.Series:
    return pd.Series(
        [classify(row) for row in records.to_dict(orient="records")],
        index=records.index,
        dtype=object,
    )


def filter_records(
    records: pd.DataFrame,
    date_range: DateRange | None = None,
    categories: Iterable[str] | None = None,
    classify: Classifier | None = None,
    *,
    date_field: str = "date",
) -> pd.DataFrame:
    """
    Keep records inside the date window and matching at least one selected category.

    An empty selection (or no classifier) passes everything through.
    """
    if records.empty:
        return records.copy()

    mask = pd.Series(True, index=records.index)

    if date_range is not None and date_range.is_active and date_field in records.columns:
        mask &= records[date_field].map(date_range.contains).astype(bool)

    selected = {c for c in (categories or ()) if c}
    if selected and classify is not None:
        mask &= _categories(records, classify).map(lambda c: c in selected).astype(bool)

    return records[mask].reset_index(drop=True)


def available_categories(records: pd.DataFrame, classify: Classifier | None) -> list[str]:
    if classify is None or records.empty:
        return []
    return sorted({c for c in _categories(records, classify) if c})


def observed_date_range(records: pd.DataFrame, date_field: str = "date") -> DateRange:
    """Earliest and latest parseable dates, used as the default filter window."""
    if records.empty or date_field not in records.columns:
        return DateRange()
    days = sorted(d for d in (normalize_date(v) for v in records[date_field]) if d)
    if not days:
        return DateRange()
    return DateRange(start=days[0], end=days[-1])
