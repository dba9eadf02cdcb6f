"""1-indexed page slicing for aggregated tables."""
from __future__ import annotations

import math
from typing import Sequence, TypeVar, Union

import pandas as pd

T = TypeVar("T")


def paginate(
    records: Union[pd.DataFrame, Sequence[T]],
    page: int,
    page_size: int,
) -> Union[pd.DataFrame, Sequence[T]]:
    """Slice for `page` (1-indexed). Out-of-range pages give an empty slice."""
    if page < 1 or page_size < 1:
        start = end = 0
    else:
        start = (page - 1) * page_size
        end = start + page_size
    if isinstance(records, pd.DataFrame):
        return records.iloc[start:end].reset_index(drop=True)
    return records[start:end]


def total_pages(count: int, page_size: int) -> int:
    if page_size < 1:
        return 0
    return math.ceil(count / page_size)


def display_total_pages(count: int, page_size: int) -> int:
    """Page count for pagination controls: an empty table still shows one page."""
    return max(1, total_pages(count, page_size))
