"""Header lookup for spreadsheet feeds whose column names drift (PT/EN, synonyms)."""
from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Sequence

NOT_FOUND = -1


def _norm(value: Any) -> str:
    return re.sub(r"\s+", " ", str(value).strip().lower())


def resolve_column(headers: Sequence[Any], logical_name: str, *, exact_only: bool = False) -> int:
    """
    Index of the header matching `logical_name`.

    Exact (trimmed, case-insensitive) matches win over partial ones; a partial
    match is the first header containing the name. Empty headers are skipped.
    Returns NOT_FOUND (-1) when nothing matches.
    """
    target = _norm(logical_name)
    if not target:
        return NOT_FOUND

    normalized = [_norm(h) if h is not None else "" for h in headers]

    for idx, header in enumerate(normalized):
        if header and header == target:
            return idx

    if exact_only:
        return NOT_FOUND

    return find_containing(headers, logical_name)


def find_containing(headers: Sequence[Any], name: str) -> int:
    """First header containing `name` (case-insensitive); a later exact match does not win."""
    target = _norm(name)
    if not target:
        return NOT_FOUND
    for idx, header in enumerate(headers):
        if header is not None and target in _norm(header):
            return idx
    return NOT_FOUND


def resolve_any(headers: Sequence[Any], names: Iterable[str], *, exact_only: bool = False) -> int:
    """Try synonyms in priority order; the first one that resolves wins."""
    for name in names:
        idx = resolve_column(headers, name, exact_only=exact_only)
        if idx != NOT_FOUND:
            return idx
    return NOT_FOUND


def build_column_map(
    headers: Sequence[Any],
    synonyms: Mapping[str, Sequence[str]],
    *,
    exact_only: bool = False,
) -> dict[str, int]:
    """Resolve every logical field of a feed once per table."""
    return {
        field: resolve_any(headers, names, exact_only=exact_only)
        for field, names in synonyms.items()
    }


def missing_fields(column_map: Mapping[str, int]) -> list[str]:
    return [field for field, idx in column_map.items() if idx == NOT_FOUND]
