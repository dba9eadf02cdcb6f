"""Raw spreadsheet payloads as an immutable header + rows table."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

Cell = Any


@dataclass(frozen=True)
class RawTable:
    """Header row plus data rows exactly as the sheets API returned them."""

    headers: tuple[Any, ...]
    rows: tuple[tuple[Cell, ...], ...] = field(default_factory=tuple)

    @classmethod
    def from_values(cls, values: Sequence[Sequence[Cell]] | None) -> "RawTable":
        if not values:
            return cls(headers=())
        headers = tuple(values[0] or ())
        rows = tuple(tuple(row or ()) for row in values[1:])
        return cls(headers=headers, rows=rows)

    @classmethod
    def from_payload(cls, payload: Any) -> "RawTable":
        """
        Build a table from an API response.

        Endpoints answer either `{"values": [...]}` or `{"data": {"values": [...]}}`;
        anything else yields an empty table.
        """
        if not isinstance(payload, dict):
            return cls(headers=())
        values = payload.get("values")
        if values is None and isinstance(payload.get("data"), dict):
            values = payload["data"].get("values")
        if not isinstance(values, list):
            return cls(headers=())
        return cls.from_values(values)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def cell(self, row: Sequence[Cell], index: int) -> Cell:
        """Cell at `index`, or None when the column is missing or the row is short."""
        if index < 0 or index >= len(row):
            return None
        return row[index]
