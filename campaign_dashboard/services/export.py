"""Excel export of a feed's filtered, aggregated table."""
from __future__ import annotations

import gc
import os
import tempfile
from typing import Any

import pandas as pd
import xlsxwriter

from .pipeline.feeds import FeedConfig

CURRENCY_FIELDS = {"cost", "cpm", "cpc"}
PERCENT_FIELDS = {"ctr", "vtr"}
DECIMAL_FIELDS = {"frequency"}

COLUMN_LABELS = {
    "date": "First date",
    "campaign_name": "Campaign",
    "ad_group_name": "Ad group",
    "ad_name": "Creative",
    "keyword": "Keyword",
    "destination_url": "Destination URL",
    "impressions": "Impressions",
    "clicks": "Clicks",
    "link_clicks": "Link clicks",
    "cost": "Investment",
    "reach": "Reach",
    "results": "Engagements",
    "video_views": "Video views",
    "video_views_100": "Video views 100%",
    "cpm": "CPM",
    "cpc": "CPC",
    "ctr": "CTR",
    "frequency": "Frequency",
    "vtr": "VTR",
}


def build_dashboard_workbook(
    records: pd.DataFrame,
    totals: dict[str, Any],
    feed: FeedConfig,
    currency_symbol: str = "R$",
) -> str:
    """
    Write the full (unpaginated) table plus a totals row to a temp .xlsx.

    CTR / VTR are stored as percentages (0-100) and written divided by 100
    so Excel's percent format shows them correctly.

    Returns:
        Path to generated Excel file
    """
    tmp = tempfile.NamedTemporaryFile(delete=False, suffix=".xlsx")
    tmp_path = tmp.name
    tmp.close()

    try:
        workbook = xlsxwriter.Workbook(tmp_path, {"nan_inf_to_errors": True})
        ws = workbook.add_worksheet(feed.label[:31])

        header_fmt = workbook.add_format({
            "bold": True,
            "align": "center",
            "valign": "vcenter",
            "bg_color": "#3a3838",
            "font_color": "white",
            "border": 1,
        })
        text_fmt = workbook.add_format({"align": "left"})
        number_fmt = workbook.add_format({"num_format": "#,##0", "align": "center"})
        ratio_fmt = workbook.add_format({"num_format": "0.00", "align": "center"})
        currency_fmt = workbook.add_format(
            {"num_format": f'"{currency_symbol}" #,##0.00', "align": "center"}
        )
        percent_fmt = workbook.add_format({"num_format": "0.00%", "align": "center"})
        total_label_fmt = workbook.add_format({"bold": True, "top": 1, "bg_color": "#d9e1f2"})
        total_fmts = {
            "number": workbook.add_format(
                {"bold": True, "top": 1, "bg_color": "#d9e1f2", "num_format": "#,##0", "align": "center"}
            ),
            "ratio": workbook.add_format(
                {"bold": True, "top": 1, "bg_color": "#d9e1f2", "num_format": "0.00", "align": "center"}
            ),
            "currency": workbook.add_format(
                {
                    "bold": True,
                    "top": 1,
                    "bg_color": "#d9e1f2",
                    "num_format": f'"{currency_symbol}" #,##0.00',
                    "align": "center",
                }
            ),
            "percent": workbook.add_format(
                {"bold": True, "top": 1, "bg_color": "#d9e1f2", "num_format": "0.00%", "align": "center"}
            ),
        }

        columns = list(records.columns)

        def kind_of(col: str) -> str:
            if col in CURRENCY_FIELDS:
                return "currency"
            if col in PERCENT_FIELDS:
                return "percent"
            if col in DECIMAL_FIELDS:
                return "ratio"
            if pd.api.types.is_numeric_dtype(records[col]):
                return "number"
            return "text"

        kinds = {col: kind_of(col) for col in columns}
        formats = {
            "currency": currency_fmt,
            "percent": percent_fmt,
            "ratio": ratio_fmt,
            "number": number_fmt,
        }

        for col_idx, col in enumerate(columns):
            ws.write_string(0, col_idx, COLUMN_LABELS.get(col, col), header_fmt)
            ws.set_column(col_idx, col_idx, 40 if kinds[col] == "text" else 14)

        for row_idx, row in enumerate(records.to_dict(orient="records"), start=1):
            for col_idx, col in enumerate(columns):
                value = row[col]
                kind = kinds[col]
                if kind == "text":
                    ws.write_string(row_idx, col_idx, "" if value is None else str(value), text_fmt)
                else:
                    number = float(value or 0)
                    if kind == "percent":
                        number /= 100
                    ws.write_number(row_idx, col_idx, number, formats[kind])

        total_row = len(records) + 1
        for col_idx, col in enumerate(columns):
            kind = kinds[col]
            if col_idx == 0:
                ws.write_string(total_row, 0, "Total", total_label_fmt)
            elif col in totals and kind != "text":
                number = float(totals[col] or 0)
                if kind == "percent":
                    number /= 100
                ws.write_number(total_row, col_idx, number, total_fmts[kind])
            else:
                ws.write_blank(total_row, col_idx, None, total_label_fmt)

        ws.freeze_panes(1, 0)

        workbook.close()
        gc.collect()

        return tmp_path

    except Exception:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
