# charts.py
# Purpose: All visuals. No file I/O here. Draws the view models built in
# choropleth.py and table_view.py.
# How to change later:
# - Colors/sizes per chart: search "TUNE:" comments near each chart.

from __future__ import annotations
import html
from typing import List, Optional

import altair as alt
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from choropleth import AreaLabel, ChoroplethView, LegendModel, tooltip_lines
from config import MAP_HEIGHT_PX, Variable
from table_view import TableView

# Preferred greys for table/legend chrome
COLOR_BORDER = "#DDDDDD"   # TUNE: legend/table borders
COLOR_TEXT = "#555555"     # TUNE: legend label colour
HEADER_BG = "#F3F4F6"      # TUNE: table header background


# -----------------------------
# Error / empty states
# -----------------------------
def render_error(message: str):
    st.error(message)


# =========================================================
# Data table (HTML)
# TUNE: cell padding, header background.
# =========================================================
def render_data_table(view: TableView):
    if view.message:
        st.markdown(
            f"<div style='text-align:center;padding:12px;color:#6B7280;'>{html.escape(view.message)}</div>",
            unsafe_allow_html=True,
        )
        return

    # leading unlabeled cell sits above the date column
    thead = "<th style='padding:6px 8px;'></th>" + "".join(
        f"<th style='text-align:left;padding:6px 8px;white-space:nowrap;'>{html.escape(h)}</th>"
        for h in view.headers
    )
    rows_html = []
    for row in view.rows:
        cells = [f"<td style='padding:6px 8px;white-space:nowrap;font-weight:600;'>{html.escape(row[0])}</td>"]
        cells += [f"<td style='padding:6px 8px;white-space:nowrap;'>{html.escape(c)}</td>" for c in row[1:]]
        rows_html.append("<tr>" + "".join(cells) + "</tr>")

    table_html = (
        "<div style='overflow-x:auto;'>"
        "<table style='border-collapse:separate;border-spacing:0;width:100%;font-size:13px;'>"
        f"<thead style='background:{HEADER_BG};'><tr>{thead}</tr></thead>"
        f"<tbody>{''.join(rows_html)}</tbody>"
        "</table>"
        "</div>"
    )
    st.markdown(table_html, unsafe_allow_html=True)


# =========================================================
# Legend – horizontal gradient bar with 0 / max labels
# TUNE: bar height, label font size.
# =========================================================
def legend_chart(legend: LegendModel) -> alt.LayerChart:
    gradient = alt.Gradient(
        gradient="linear",
        stops=[alt.GradientStop(color=c, offset=o / 100.0) for o, c in legend.stops],
        x1=0, x2=1, y1=0, y2=0,
    )
    x_scale = alt.Scale(domain=[0, 1])
    bar = (
        alt.Chart(pd.DataFrame({"x0": [0.0], "x1": [1.0]}))
        .mark_rect(color=gradient, stroke=COLOR_BORDER, strokeWidth=0.5, cornerRadius=3)
        .encode(x=alt.X("x0:Q", scale=x_scale, axis=None), x2="x1:Q")
    )
    labels_df = pd.DataFrame({
        "x": [0.0, 1.0],
        "label": [legend.min_label, legend.max_label],
    })
    min_text = (
        alt.Chart(labels_df.iloc[[0]])
        .mark_text(align="left", baseline="top", dy=14, fontSize=12, color=COLOR_TEXT)
        .encode(x=alt.X("x:Q", scale=x_scale, axis=None), text="label:N")
    )
    max_text = (
        alt.Chart(labels_df.iloc[[1]])
        .mark_text(align="right", baseline="top", dy=14, fontSize=12, color=COLOR_TEXT)
        .encode(x=alt.X("x:Q", scale=x_scale, axis=None), text="label:N")
    )
    return (
        alt.layer(bar, min_text, max_text)
        .properties(title=legend.title, height=20)
        .configure_view(strokeWidth=0)
    )


def render_legend(legend: LegendModel):
    st.altair_chart(legend_chart(legend), use_container_width=True)


# =========================================================
# Choropleth map (Plotly geo; scroll to zoom, drag to pan)
# TUNE: MAP_HEIGHT_PX in config, outline colour/width below.
# =========================================================
def choropleth_figure(
    view: ChoroplethView,
    geojson: dict,
    variable: Variable,
    *,
    height_px: int = MAP_HEIGHT_PX,
    labels: Optional[List[AreaLabel]] = None,
):
    tips = [tooltip_lines(f, variable) for f in view.features]
    df = pd.DataFrame({
        "name": [f.name for f in view.features],
        "fill": [f.fill for f in view.features],
        "title": [t[0] for t in tips],
        "region_line": [t[1] for t in tips],
        "value_line": [t[2] for t in tips],
    })
    # fills are precomputed, so colours map to themselves
    identity = {c: c for c in df["fill"].unique()}
    fig = px.choropleth(
        df,
        geojson=geojson,
        locations="name",
        featureidkey="properties.name",
        color="fill",
        color_discrete_map=identity,
        custom_data=["title", "region_line", "value_line"],
    )
    fig.update_traces(
        hovertemplate="<b>%{customdata[0]}</b><br>%{customdata[1]}<br>%{customdata[2]}<extra></extra>",
        marker_line_color="#FFFFFF",   # TUNE: outline
        marker_line_width=0.5,
    )
    if labels:
        # name at each area's centroid (region map)
        fig.add_trace(go.Scattergeo(
            lon=[lb.lon for lb in labels],
            lat=[lb.lat for lb in labels],
            text=[lb.text for lb in labels],
            mode="text",
            textfont=dict(size=12, color="#333333"),   # TUNE: label font
            hoverinfo="skip",
            showlegend=False,
        ))
    fig.update_geos(fitbounds="locations", visible=False, projection_type="mercator")
    fig.update_layout(
        showlegend=False,
        dragmode="pan",
        margin=dict(l=0, r=0, t=0, b=0),
        height=height_px,
    )
    return fig


def render_choropleth(view: ChoroplethView, geojson: dict, variable: Variable, labels: Optional[List[AreaLabel]] = None):
    fig = choropleth_figure(view, geojson, variable, labels=labels)
    st.plotly_chart(fig, use_container_width=True, config={"scrollZoom": True, "displayModeBar": False})
    render_legend(view.legend)
