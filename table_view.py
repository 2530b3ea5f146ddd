# table_view.py
# Purpose: Table model for the data page (headers, formatted cells). No Streamlit here.

from __future__ import annotations
import math
import numbers
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

import pandas as pd

NO_DATA_MESSAGE = "No data available for the selected filters"
DATE_FIELD = "date"


def titleize(field: str) -> str:
    """'median_income_dkk' -> 'Median Income Dkk'."""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), str(field).replace("_", " "))


def table_headers(df: pd.DataFrame) -> List[str]:
    """Header labels from the first record's fields, without the date."""
    if df is None or df.empty:
        return []
    return [titleize(c) for c in df.columns if c != DATE_FIELD]


def format_date(value: object) -> str:
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return str(value) if value else "-"
    return ts.strftime("%Y-%m-%d")


def format_cell(value: object) -> str:
    """Comma thousands; integers without decimals, the rest with two; falsy text -> '-'."""
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        v = float(value)
        if math.isnan(v):
            return "NaN"
        if v.is_integer():
            return f"{v:,.0f}"
        return f"{v:,.2f}"
    if not value:
        return "-"
    return str(value)


@dataclass(frozen=True)
class TableView:
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]
    message: Optional[str] = None


def build_table(df: pd.DataFrame, headers: List[str]) -> TableView:
    """Rows for the filtered records; `headers` were derived once at load time."""
    if df is None or df.empty:
        return TableView(headers=tuple(headers), rows=(), message=NO_DATA_MESSAGE)
    fields = [c for c in df.columns if c != DATE_FIELD]
    rows = []
    for rec in df.to_dict(orient="records"):
        cells = [format_date(rec.get(DATE_FIELD))]
        cells.extend(format_cell(rec[c]) for c in fields)
        rows.append(tuple(cells))
    return TableView(headers=tuple(headers), rows=tuple(rows))
