# app.py
# Purpose: Streamlit main app - Danish municipality/region demographics.
# Pages (sidebar menu):
# 1. Data table: region / municipality / year filters over the demographic records.
# 2. Municipality map: choropleth per municipality, variable selector + date slider.
# 3. Region map: same, rolled up to the five regions.

from __future__ import annotations
import logging

import pandas as pd
import streamlit as st

import config
from charts import render_choropleth, render_data_table, render_error
from choropleth import area_labels, build_choropleth
from data_loader import DataLoadError, fetch_records, load_boundaries, load_demographics, rollup_by_region
from filters import municipality_options, region_options, year_options
from state import (
    AppState,
    MapState,
    init_map,
    init_table,
    log_unwired_selection,
    remember_view,
    reset_filters,
    select_date,
    select_variable,
    update_filters,
)
from table_view import build_table
from temporal_index import TemporalIndex

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("app")

# ====================================================================
# CONFIGURATION CONSTANTS
# ====================================================================
APP_TITLE = "Danish Municipality Demographics"
STATE_KEY = "app_state"
ALL = "All"
TABLE_ERROR = "Error loading data. Please try again later."
MAP_ERROR = "Error loading map data. Please try again later."

PAGES = ["Data table", "Municipality map", "Region map"]

# view key -> (title, boundary source, entity field, variables, name labels on the map)
MAP_VIEWS = {
    "municipality": ("Population by Municipality", config.MUNICIPALITY_GEOJSON, "municipality", list(config.VARIABLES), False),
    "region": ("Population by Region", config.REGION_GEOJSON, "region", config.REGION_VARIABLES, True),
}


def _app_state() -> AppState:
    if STATE_KEY not in st.session_state:
        st.session_state[STATE_KEY] = AppState()
    return st.session_state[STATE_KEY]


def _or_none(value):
    return None if value == ALL else value


# ====================================================================
# Data table
# ====================================================================
def _load_table_records() -> pd.DataFrame:
    if config.API_BASE_URL:
        return fetch_records(config.API_BASE_URL.rstrip("/") + config.API_RECORDS_PATH)
    return load_demographics(config.DEMOGRAPHICS_CSV)


def _on_region_change():
    table = _app_state().table
    update_filters(table, region=_or_none(st.session_state["f_region"]))
    # municipality list follows the region
    st.session_state["f_municipality"] = table.filters.municipality or ALL


def _on_municipality_change():
    update_filters(_app_state().table, municipality=_or_none(st.session_state["f_municipality"]))


def _on_year_change():
    update_filters(_app_state().table, year=_or_none(st.session_state["f_year"]))


def _on_reset():
    reset_filters(_app_state().table)
    for k in ("f_region", "f_municipality", "f_year"):
        st.session_state[k] = ALL


def page_table(state: AppState):
    st.title("📋 Municipality Demographics")

    if state.table is None:
        try:
            state.table = init_table(_load_table_records())
        except DataLoadError as e:
            logger.error("Error fetching data: %s", e)
            render_error(TABLE_ERROR)
            st.stop()
    table = state.table

    # widget state is dropped when the page is left; re-seed it from AppState
    st.session_state.setdefault("f_region", table.filters.region or ALL)
    st.session_state.setdefault("f_municipality", table.filters.municipality or ALL)
    st.session_state.setdefault("f_year", table.filters.year or ALL)

    st.sidebar.header("Filters")
    st.sidebar.selectbox("Region", [ALL] + region_options(table.records), key="f_region", on_change=_on_region_change)
    st.sidebar.selectbox(
        "Municipality",
        [ALL] + municipality_options(table.records, table.filters.region),
        key="f_municipality",
        on_change=_on_municipality_change,
    )
    st.sidebar.selectbox("Year", [ALL] + year_options(table.records), key="f_year", on_change=_on_year_change)
    st.sidebar.button("Reset filters", on_click=_on_reset)

    filtered = table.filtered
    st.caption(f"{len(filtered):,} of {len(table.records):,} records")
    render_data_table(build_table(filtered, table.headers))


# ====================================================================
# Maps
# ====================================================================
def _load_map(view_key: str) -> MapState:
    _, geo_source, entity_key, variables, _ = MAP_VIEWS[view_key]
    geojson = load_boundaries(geo_source)
    records = load_demographics(config.DEMOGRAPHICS_CSV)
    if entity_key == "region":
        records = rollup_by_region(records)
    index = TemporalIndex.from_frame(records, key=entity_key)
    logger.info("Processed demographic data: %d %s entities", len(index), entity_key)
    variable = config.DEFAULT_VARIABLE if config.DEFAULT_VARIABLE in variables else variables[0]
    return init_map(index, geojson, variable, config.DEFAULT_DATE)


def _on_variable_change(view_key: str):
    select_variable(_app_state().maps[view_key], st.session_state[f"{view_key}_variable"])


def _on_date_change(view_key: str):
    select_date(_app_state().maps[view_key], st.session_state[f"{view_key}_date"])


def _on_unwired_change(control: str, key: str):
    log_unwired_selection(control, st.session_state[key])


def page_map(state: AppState, view_key: str):
    title, _, _, variables, show_labels = MAP_VIEWS[view_key]
    st.title(f"🗺️ {title}")

    if view_key not in state.maps:
        try:
            state.maps[view_key] = _load_map(view_key)
        except DataLoadError as e:
            logger.error("Error initializing map: %s", e)
            render_error(MAP_ERROR)
            st.stop()
    ms = state.maps[view_key]

    var_key, date_key = f"{view_key}_variable", f"{view_key}_date"
    st.session_state.setdefault(var_key, ms.variable)
    st.session_state.setdefault(date_key, ms.date)

    st.sidebar.header("Map options")
    st.sidebar.selectbox(
        "Variable", variables,
        format_func=lambda k: config.VARIABLES[k].label,
        key=var_key, on_change=_on_variable_change, args=(view_key,),
    )
    st.sidebar.select_slider("Date", options=config.DATES, key=date_key, on_change=_on_date_change, args=(view_key,))

    # Not connected to the map yet (selection is only logged)
    st.sidebar.radio(
        "Region type", config.REGION_TYPES, key=f"{view_key}_region_type",
        on_change=_on_unwired_change, args=("Region type", f"{view_key}_region_type"),
    )
    st.sidebar.radio(
        "Data type", config.DATA_TYPES, key=f"{view_key}_data_type",
        on_change=_on_unwired_change, args=("Data type", f"{view_key}_data_type"),
    )

    variable = config.VARIABLES[ms.variable]
    view = build_choropleth(ms.geojson["features"], ms.index, ms.variable, variable)
    shown = remember_view(ms, view)
    if shown is None:
        st.info(f"No data available for {variable.label} on the selected date")
        return
    labels = area_labels(ms.geojson["features"]) if show_labels else None
    render_choropleth(shown, ms.geojson, config.VARIABLES[shown.variable], labels=labels)


# --------------------------------
# Page Config
# --------------------------------
st.set_page_config(page_title=APP_TITLE, page_icon="🇩🇰", layout="wide")

st.sidebar.header("Menu")
menu = st.sidebar.radio("Page", PAGES, index=0)

app_state = _app_state()
if menu == "Data table":
    page_table(app_state)
elif menu == "Municipality map":
    page_map(app_state, "municipality")
elif menu == "Region map":
    page_map(app_state, "region")

# --------------------------------
# Footer
# --------------------------------
st.write("")
st.caption("Data: mock demographic records for Danish municipalities and regions")
