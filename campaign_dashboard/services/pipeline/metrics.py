"""Ratio metrics (CPM, CPC, CTR, frequency, VTR), sorting and totals."""
from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pandas as pd


def _safe_ratio(num: pd.Series, den: pd.Series, scale: float = 1.0) -> pd.Series:
    out = (num.astype(float) / den.astype(float) * scale).replace([np.inf, -np.inf], 0).fillna(0)
    return out.where(den.astype(float) > 0, 0.0).astype(float)


def derive_metrics(
    df: pd.DataFrame,
    *,
    cpc_clicks_field: str = "clicks",
    ctr_clicks_field: str = "clicks",
) -> pd.DataFrame:
    """
    Recompute ratio metrics from the (already summed) additive columns.

    A metric is only added when its inputs are present. Every zero or
    negative denominator yields 0.
    """
    out = df.copy()
    cols = set(out.columns)

    if {"cost", "impressions"} <= cols:
        out["cpm"] = _safe_ratio(out["cost"], out["impressions"], 1000.0)
    if {"cost", cpc_clicks_field} <= cols:
        out["cpc"] = _safe_ratio(out["cost"], out[cpc_clicks_field])
    if {ctr_clicks_field, "impressions"} <= cols:
        out["ctr"] = _safe_ratio(out[ctr_clicks_field], out["impressions"], 100.0)
    if {"impressions", "reach"} <= cols:
        out["frequency"] = _safe_ratio(out["impressions"], out["reach"])
    if {"video_views_100", "impressions"} <= cols:
        out["vtr"] = _safe_ratio(out["video_views_100"], out["impressions"], 100.0)

    return out


def sort_records(df: pd.DataFrame, field: str = "cost", descending: bool = True) -> pd.DataFrame:
    """Stable sort; ties keep their input order in both directions."""
    if field not in df.columns or df.empty:
        return df.reset_index(drop=True)
    return df.sort_values(field, ascending=not descending, kind="mergesort").reset_index(drop=True)


def _native(value: Any) -> Any:
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    return value


def compute_totals(
    df: pd.DataFrame,
    additive_fields: Sequence[str],
    *,
    cpc_clicks_field: str = "clicks",
    ctr_clicks_field: str = "clicks",
) -> dict[str, Any]:
    """
    Summary row for the filtered set: sums of additive fields with ratios
    re-derived from those sums (never an average of per-row ratios).
    """
    sums: dict[str, Any] = {}
    for field in additive_fields:
        if field in df.columns:
            sums[field] = _native(df[field].sum()) if not df.empty else 0
    summary = derive_metrics(
        pd.DataFrame([sums]),
        cpc_clicks_field=cpc_clicks_field,
        ctr_clicks_field=ctr_clicks_field,
    )
    return {k: _native(v) for k, v in summary.to_dict(orient="records")[0].items()}
