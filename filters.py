# filters.py
# Purpose: Region / municipality / year predicates for the data table.
# None means "no constraint" everywhere in this module.

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Optional

import pandas as pd


@dataclass(frozen=True)
class FilterState:
    region: Optional[str] = None
    municipality: Optional[str] = None
    year: Optional[int] = None

    def with_region(self, region: Optional[str], df: pd.DataFrame) -> "FilterState":
        """Change region; drop the municipality if it is not in the region's option list."""
        municipality = self.municipality
        if municipality is not None and municipality not in municipality_options(df, region):
            municipality = None
        return replace(self, region=region or None, municipality=municipality)

    def with_municipality(self, municipality: Optional[str]) -> "FilterState":
        return replace(self, municipality=municipality or None)

    def with_year(self, year: Optional[int]) -> "FilterState":
        return replace(self, year=int(year) if year not in (None, "") else None)

    def is_empty(self) -> bool:
        return self.region is None and self.municipality is None and self.year is None


def _distinct(values: pd.Series) -> List[str]:
    return sorted({str(v) for v in values.dropna() if str(v).strip()})


def record_years(df: pd.DataFrame) -> pd.Series:
    return pd.to_datetime(df["date"], errors="coerce").dt.year


def region_options(df: pd.DataFrame) -> List[str]:
    if df is None or df.empty or "region" not in df.columns:
        return []
    return _distinct(df["region"])


def municipality_options(df: pd.DataFrame, region: Optional[str] = None) -> List[str]:
    """All municipalities, or only those whose region equals `region`."""
    if df is None or df.empty or "municipality" not in df.columns:
        return []
    if region:
        df = df[df["region"] == region]
    return _distinct(df["municipality"])


def year_options(df: pd.DataFrame) -> List[int]:
    if df is None or df.empty or "date" not in df.columns:
        return []
    return sorted(int(y) for y in record_years(df).dropna().unique())


def apply_filters(df: pd.DataFrame, state: FilterState) -> pd.DataFrame:
    """Rows matching every set filter (AND). An empty state returns the full set."""
    if df is None or df.empty or state.is_empty():
        return df
    mask = pd.Series(True, index=df.index)
    if state.region is not None:
        mask &= df["region"] == state.region
    if state.municipality is not None:
        mask &= df["municipality"] == state.municipality
    if state.year is not None:
        mask &= record_years(df) == state.year
    return df[mask]
