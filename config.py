# config.py
# Purpose: Paths, URLs and the variable catalogue shared by the app and the server.
# How to change later:
# - Point at other files with the DASHBOARD_* environment variables.
# - Add a map variable: add it to NUMERIC_FIELDS (if new) and to VARIABLES.

from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List

import plotly.express as px

BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = Path(os.environ.get("DASHBOARD_DATA_DIR", BASE_DIR / "data"))
INDEX_HTML = BASE_DIR / "index.html"

DEMOGRAPHICS_CSV = os.environ.get("DASHBOARD_CSV", str(DATA_DIR / "dk_region_municipality_demo_mock.csv"))
MUNICIPALITY_GEOJSON = os.environ.get(
    "DASHBOARD_MUNICIPALITY_GEOJSON",
    "https://raw.githubusercontent.com/codeforgermany/click_that_hood/main/public/data/denmark-municipalities.geojson",
)
REGION_GEOJSON = os.environ.get("DASHBOARD_REGION_GEOJSON", str(DATA_DIR / "regionsinddeling_formatted_noz.geojson"))
API_BASE_URL = os.environ.get("DASHBOARD_API_URL") or None
API_RECORDS_PATH = "/api/municipality-demographics"

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

CSV_DELIMITER = ";"

NUMERIC_FIELDS: List[str] = [
    "population_total", "population_male", "population_female",
    "births", "deaths", "net_migration", "median_age",
    "avg_household_size", "households_total", "median_income_dkk",
    "employment_rate", "unemployment_rate",
]

# Summed when rolling municipalities up to regions; every other numeric field is averaged.
COUNT_FIELDS: List[str] = [
    "population_total", "population_male", "population_female",
    "births", "deaths", "net_migration", "households_total",
]

# Date slider stops (fixed)
DATES: List[str] = ["2024-01-01", "2024-07-01", "2025-01-01"]
DEFAULT_DATE = "2025-01-01"
DEFAULT_VARIABLE = "population_total"

NO_DATA_FILL = "#f0f0f0"   # TUNE: fill for features without data
LEGEND_STEPS = 10

MAP_HEIGHT_PX = 700

# Unwired map controls (logged only)
REGION_TYPES = ["Municipalities", "Regions"]
DATA_TYPES = ["Absolute", "Per capita"]


def _thousands(v: float) -> str:
    v = float(v)
    return f"{int(v):,}" if v.is_integer() else f"{v:,}"


def _percent(v: float) -> str:
    return f"{float(v) * 100:.1f}%"


@dataclass(frozen=True)
class Variable:
    """Map variable: display label, value formatter, colour ramp."""
    label: str
    format: Callable[[float], str]
    colorscale: List[str]


VARIABLES = {
    "population_total": Variable("Total Population", _thousands, px.colors.sequential.Blues),
    "population_male": Variable("Male Population", _thousands, px.colors.sequential.Blues),
    "population_female": Variable("Female Population", _thousands, px.colors.sequential.Blues),
    "births": Variable("Births", _thousands, px.colors.sequential.Greens),
    "deaths": Variable("Deaths", _thousands, px.colors.sequential.Reds),
    "net_migration": Variable("Net Migration", _thousands, px.colors.diverging.RdBu),
    "median_age": Variable("Median Age", lambda d: f"{float(d):.1f}", px.colors.sequential.Viridis),
    "avg_household_size": Variable("Avg. Household Size", lambda d: f"{float(d):.2f}", px.colors.sequential.YlOrRd),
    "households_total": Variable("Total Households", _thousands, px.colors.sequential.Purples),
    "median_income_dkk": Variable("Median Income (DKK)", lambda d: f"{round(float(d)):,}", px.colors.sequential.Greens),
    "employment_rate": Variable("Employment Rate", _percent, px.colors.sequential.Greens),
    "unemployment_rate": Variable("Unemployment Rate", _percent, px.colors.sequential.Reds),
}

REGION_VARIABLES = ["population_total", "median_age", "employment_rate", "unemployment_rate"]
