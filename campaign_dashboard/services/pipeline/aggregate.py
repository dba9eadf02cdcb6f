"""Group normalized records by a key and sum additive metrics."""
from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

import pandas as pd

KeyFn = Callable[[Mapping[str, Any]], str]

_KEY_COL = "__group_key"


def _text(value: Any) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value)


def by_field(name: str) -> KeyFn:
    """Exact, case-sensitive key on one field."""

    def key(record: Mapping[str, Any]) -> str:
        return _text(record.get(name))

    return key


def by_fields(*names: str) -> KeyFn:
    """Composite key (e.g. name + id) for feeds where names repeat."""

    def key(record: Mapping[str, Any]) -> str:
        parts = [_text(record.get(n)) for n in names]
        if not any(parts):
            return ""
        return " | ".join(parts)

    return key


def by_folded_field(name: str) -> KeyFn:
    """Trimmed, lower-cased key; the first spelling seen is what gets displayed."""

    def key(record: Mapping[str, Any]) -> str:
        return _text(record.get(name)).strip().lower()

    return key


def aggregate(
    records: pd.DataFrame,
    key_fn: KeyFn,
    additive_fields: Sequence[str],
) -> pd.DataFrame:
    """
    One row per distinct key, in first-seen order.

    Additive fields are summed; every other column keeps the value of the
    first record seen for the group. Records with an empty key are dropped.
    """
    if records.empty:
        return records.copy().reset_index(drop=True)

    work = records.copy()
    work[_KEY_COL] = [key_fn(row) for row in records.to_dict(orient="records")]
    work = work[work[_KEY_COL] != ""]
    if work.empty:
        return records.iloc[0:0].copy().reset_index(drop=True)

    additive = [f for f in additive_fields if f in work.columns]

    grouped = work.drop_duplicates(_KEY_COL, keep="first").set_index(_KEY_COL)
    if additive:
        sums = work.groupby(_KEY_COL, sort=False)[additive].sum()
        grouped[additive] = sums.loc[grouped.index, additive]

    return grouped.reset_index(drop=True)[list(records.columns)]
