"""Cell coercion and row normalization for spreadsheet feeds."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Sequence

import pandas as pd

from .columns import NOT_FOUND, build_column_map
from .table import RawTable

FIELD_KINDS = ("text", "number", "integer", "date")

# Currency markers seen in the feeds (BRL first, it is the common one)
_STRIP_RE = re.compile(r"R\$|[$€£%\s ]")
_THOUSANDS_DOT_RE = re.compile(r"^-?\d{1,3}(\.\d{3})+$")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$")
_DAY_FIRST_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:[ T].*)?$")


@dataclass(frozen=True)
class FieldSpec:
    """A logical field: header synonyms in priority order plus the type to coerce to."""

    names: tuple[str, ...]
    kind: str = "text"

    def __post_init__(self) -> None:
        if self.kind not in FIELD_KINDS:
            raise ValueError(f"Unknown field kind: {self.kind}")


def _clean_numeric_text(value: str) -> str:
    s = value.strip()
    # (100) → -100
    s = re.sub(r"^\((.*)\)$", r"-\1", s)
    s = _STRIP_RE.sub("", s)
    if "," in s:
        # pt-BR: 1.234,56
        return s.replace(".", "").replace(",", ".")
    if _THOUSANDS_DOT_RE.match(s):
        return s.replace(".", "")
    return s


def parse_number(value: Any) -> float:
    """Locale-tolerant float parse. Anything unparseable becomes 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else 0.0
    text = _clean_numeric_text(str(value))
    if not text:
        return 0.0
    try:
        number = float(text)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_integer(value: Any) -> int:
    """Same cleaning as parse_number, truncated to an int."""
    return int(parse_number(value))


def normalize_date(value: Any) -> str | None:
    """
    Canonical YYYY-MM-DD for a sheet date cell, or None.

    Rules:
    - "DD/MM/YYYY" is always day-first; a trailing time part is ignored
    - "YYYY-MM-DD" (optionally with a time part) is read as-is
    - any other "/" form is None
    - anything else goes through pandas' generic parser
    - impossible calendar dates (31/02) are None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        # sheet serial numbers are not a supported date representation
        return None

    text = str(value).strip()
    if not text:
        return None

    if "/" in text:
        match = _DAY_FIRST_RE.match(text)
        if not match:
            return None
        day, month, year = (int(g) for g in match.groups())
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            return None

    match = _ISO_DATE_RE.match(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            return None

    parsed = pd.to_datetime(text, errors="coerce")
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date().isoformat()


def coerce(value: Any, kind: str) -> Any:
    if kind == "number":
        return parse_number(value)
    if kind == "integer":
        return parse_integer(value)
    if kind == "date":
        return normalize_date(value)
    if value is None:
        return ""
    return str(value).strip()


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def normalize_rows(
    table: RawTable,
    fields: Mapping[str, FieldSpec],
    *,
    required: Sequence[str] = (),
    exact_only: bool = False,
    column_map: Mapping[str, int] | None = None,
) -> pd.DataFrame:
    """
    Convert raw rows into a typed frame with one column per logical field.

    Rows whose `required` fields are blank in the source are dropped. Missing
    columns yield the kind's default (0, "" or None), never an error.
    """
    if column_map is None:
        column_map = build_column_map(
            table.headers,
            {name: spec.names for name, spec in fields.items()},
            exact_only=exact_only,
        )

    records: list[dict[str, Any]] = []
    for row in table.rows:
        raw = {name: table.cell(row, column_map.get(name, NOT_FOUND)) for name in fields}
        if any(_is_blank(raw.get(name)) for name in required):
            continue
        records.append({name: coerce(raw[name], spec.kind) for name, spec in fields.items()})

    df = pd.DataFrame.from_records(records, columns=list(fields))
    for name, spec in fields.items():
        if spec.kind == "number":
            df[name] = df[name].astype(float)
        elif spec.kind == "integer":
            df[name] = df[name].astype("int64")
        else:
            df[name] = df[name].astype(object)
    return df
