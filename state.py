# state.py
# Purpose: Explicit application state + one update function per slice.
# Pages read AppState from st.session_state and change it only through these functions.

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from choropleth import ChoroplethView
from filters import FilterState, apply_filters
from table_view import table_headers
from temporal_index import TemporalIndex

logger = logging.getLogger(__name__)


@dataclass
class TableState:
    records: pd.DataFrame
    headers: List[str]
    filters: FilterState = field(default_factory=FilterState)

    @property
    def filtered(self) -> pd.DataFrame:
        return apply_filters(self.records, self.filters)


@dataclass
class MapState:
    index: TemporalIndex
    geojson: dict
    variable: str
    date: str
    last_view: Optional[ChoroplethView] = None


@dataclass
class AppState:
    table: Optional[TableState] = None
    maps: Dict[str, MapState] = field(default_factory=dict)


# ---------- Table slice ----------
def init_table(records: pd.DataFrame) -> TableState:
    """Headers are taken from the first loaded record and never recomputed."""
    return TableState(records=records, headers=table_headers(records))


def update_filters(table: TableState, *, region=..., municipality=..., year=...) -> FilterState:
    """Apply whichever filters were passed. Region goes first so municipality options cascade."""
    f = table.filters
    if region is not ...:
        f = f.with_region(region, table.records)
    if municipality is not ...:
        f = f.with_municipality(municipality)
    if year is not ...:
        f = f.with_year(year)
    table.filters = f
    return f


def reset_filters(table: TableState) -> FilterState:
    table.filters = FilterState()
    return table.filters


# ---------- Map slices ----------
def init_map(index: TemporalIndex, geojson: dict, variable: str, date: str) -> MapState:
    ms = MapState(index=index, geojson=geojson, variable=variable, date=date)
    index.update_current_data(date, variable)
    return ms


def select_variable(ms: MapState, variable: str) -> None:
    ms.variable = variable
    ms.index.update_current_data(ms.date, variable)


def select_date(ms: MapState, date: str) -> None:
    ms.date = date
    ms.index.update_current_data(date, ms.variable)


def remember_view(ms: MapState, view: Optional[ChoroplethView]) -> Optional[ChoroplethView]:
    """Keep the last successful view; a failed redraw leaves the previous one in place."""
    if view is not None:
        ms.last_view = view
    return ms.last_view


def log_unwired_selection(control: str, value: str) -> None:
    """Region-type / data-type radios. Not connected to the map yet: logs and does nothing else."""
    logger.info("%s changed to: %s", control, value)
