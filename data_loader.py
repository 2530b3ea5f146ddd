# data_loader.py
# Purpose: All file/network I/O. Demographic CSV, JSON records API, GeoJSON boundaries.
# How to change later:
# - Add/remove encodings below if your files use a new encoding.
# - Numeric columns are listed in config.NUMERIC_FIELDS.

from __future__ import annotations
import io
import json
import logging
import math
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd
import requests
import streamlit as st

from config import COUNT_FIELDS, CSV_DELIMITER, NUMERIC_FIELDS

logger = logging.getLogger(__name__)

ENCODINGS = ["utf-8-sig", "utf-8", "cp1252"]
HTTP_TIMEOUT = 30

Source = Union[str, Path]


class DataLoadError(Exception):
    """Raised when a data resource cannot be fetched or parsed."""


def _is_url(source: Source) -> bool:
    return str(source).startswith(("http://", "https://"))


# ---------- Cached readers (avoid re-opening files each run) ----------
@st.cache_data(show_spinner=False)
def _read_text_impl(path_str: str, mtime_ns: int) -> str:
    """Low-level cached reader keyed by (path, mtime)."""
    raw = Path(path_str).read_bytes()
    for enc in ENCODINGS:
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    raise DataLoadError(f"Could not decode {path_str} with any of {ENCODINGS}")


def _read_text(source: Source) -> str:
    """Read a local file or GET a URL; raise DataLoadError on any failure."""
    if _is_url(source):
        try:
            r = requests.get(str(source), timeout=HTTP_TIMEOUT)
            r.raise_for_status()
        except requests.RequestException as e:
            raise DataLoadError(f"Failed to fetch {source}: {e}") from e
        return r.text
    p = Path(source)
    if not p.is_file():
        raise DataLoadError(f"File not found: {p}")
    try:
        return _read_text_impl(str(p), p.stat().st_mtime_ns)
    except OSError as e:
        raise DataLoadError(f"Failed to read {p}: {e}") from e


# ---------- Numeric coercion ----------
def parse_decimal(value: object) -> float:
    """Locale decimal text -> float. '1.234,5' -> 1234.5; empty/invalid -> 0.0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        v = float(value)
        return v if math.isfinite(v) else 0.0
    s = str(value).strip()
    if not s:
        return 0.0
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    try:
        v = float(s)
    except ValueError:
        return 0.0
    return v if math.isfinite(v) else 0.0


def normalize_records(df: pd.DataFrame, numeric_fields: Optional[List[str]] = None) -> pd.DataFrame:
    """Strip text columns and coerce the numeric ones. Column order is kept."""
    numeric_fields = NUMERIC_FIELDS if numeric_fields is None else numeric_fields
    out = df.copy()
    out.columns = [str(c).strip() for c in out.columns]
    for c in out.columns:
        if c in numeric_fields:
            out[c] = out[c].map(parse_decimal).astype(float)
        else:
            out[c] = out[c].fillna("").astype(str).str.strip()
    return out


# ---------- Public loaders ----------
def load_demographics(source: Source) -> pd.DataFrame:
    """Semicolon-delimited demographic file -> one row per record."""
    text = _read_text(source)
    try:
        df = pd.read_csv(io.StringIO(text), sep=CSV_DELIMITER, dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataLoadError(f"Could not parse {source}: {e}") from e
    df = normalize_records(df)
    logger.info("Loaded %d demographic records from %s", len(df), source)
    return df


def fetch_records(url: str) -> pd.DataFrame:
    """GET a JSON array of records (the table view's API)."""
    try:
        r = requests.get(url, timeout=HTTP_TIMEOUT)
        r.raise_for_status()
        payload = r.json()
    except requests.RequestException as e:
        raise DataLoadError(f"Failed to fetch data from {url}: {e}") from e
    except ValueError as e:
        raise DataLoadError(f"Invalid JSON from {url}: {e}") from e
    if not isinstance(payload, list):
        raise DataLoadError(f"Expected a JSON array from {url}, got {type(payload).__name__}")
    df = normalize_records(pd.DataFrame.from_records(payload))
    logger.info("Fetched %d records from %s", len(df), url)
    return df


def load_boundaries(source: Source) -> dict:
    """GeoJSON FeatureCollection from a path or URL."""
    text = _read_text(source)
    try:
        geojson = json.loads(text)
    except ValueError as e:
        raise DataLoadError(f"Invalid GeoJSON in {source}: {e}") from e
    if not isinstance(geojson, dict) or geojson.get("type") != "FeatureCollection" \
            or not isinstance(geojson.get("features"), list):
        raise DataLoadError(f"{source} is not a GeoJSON FeatureCollection")
    logger.info("Loaded %d boundary features from %s", len(geojson["features"]), source)
    return geojson


# ---------- Light post-processing helpers ----------
def rollup_by_region(df: pd.DataFrame) -> pd.DataFrame:
    """One record per (region, date): counts summed, everything else averaged."""
    if df is None or df.empty:
        return pd.DataFrame(columns=["region", "date"])
    numeric = [c for c in df.columns if c in NUMERIC_FIELDS]
    agg = {c: ("sum" if c in COUNT_FIELDS else "mean") for c in numeric}
    out = (
        df[df["region"] != ""]
        .groupby(["region", "date"], sort=True)
        .agg(agg)
        .reset_index()
    )
    return out
