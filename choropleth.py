# choropleth.py
# Purpose: Data join, colour scale and area labels for the maps. No Streamlit here.
# The result (ChoroplethView) is a plain value; charts.render_choropleth draws it.
# How to change later:
# - "No data" fill: config.NO_DATA_FILL
# - Legend resolution: config.LEGEND_STEPS

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
from plotly.colors import make_colorscale, sample_colorscale, unlabel_rgb

from config import LEGEND_STEPS, NO_DATA_FILL, Variable
from temporal_index import TemporalIndex

logger = logging.getLogger(__name__)


def _to_hex(color: str) -> str:
    if color.startswith("#"):
        return color.lower()
    r, g, b = unlabel_rgb(color)[:3]
    return "#{:02x}{:02x}{:02x}".format(*(int(round(max(0.0, min(255.0, c)))) for c in (r, g, b)))


def _finite(v) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


class ColorScale:
    """Continuous scale: [lo, hi] -> colour ramp, clamped at both ends."""

    def __init__(self, lo: float, hi: float, colorscale: Sequence[str]):
        self.domain = (float(lo), float(hi))
        self.colorscale = make_colorscale(list(colorscale))

    def position(self, value: float) -> float:
        lo, hi = self.domain
        if hi == lo:
            return 0.5
        return float(np.clip((float(value) - lo) / (hi - lo), 0.0, 1.0))

    def __call__(self, value: float) -> str:
        return _to_hex(sample_colorscale(self.colorscale, [self.position(value)])[0])


@dataclass(frozen=True)
class LegendModel:
    title: str
    stops: Tuple[Tuple[float, str], ...]   # (offset %, colour)
    min_label: str
    max_label: str


@dataclass(frozen=True)
class FeatureFill:
    name: str
    fill: str
    value: float
    region: Optional[str]
    matched: bool


@dataclass(frozen=True)
class ChoroplethView:
    variable: str
    label: str
    domain: Tuple[float, float]
    features: Tuple[FeatureFill, ...]
    legend: LegendModel

    def fills(self) -> Dict[str, str]:
        return {f.name: f.fill for f in self.features}


def build_legend(scale: ColorScale, max_value: float, variable: Variable, steps: int = LEGEND_STEPS) -> LegendModel:
    """Gradient sampled at `steps` equal steps across [0, max]. The minimum label is always 0."""
    stops = tuple(
        (i / steps * 100.0, scale(i / steps * max_value))
        for i in range(steps + 1)
    )
    return LegendModel(
        title=variable.label,
        stops=stops,
        min_label=variable.format(0),
        max_label=variable.format(max_value),
    )


def feature_name(feature: dict) -> str:
    return ((feature or {}).get("properties") or {}).get("name") or ""


# ---------- Region labels ----------
@dataclass(frozen=True)
class AreaLabel:
    text: str
    lon: float
    lat: float


def _ring_moments(ring) -> Tuple[float, float, float]:
    """(|area|, area * cx, area * cy) of one ring, shoelace formula."""
    pts = np.asarray(ring, dtype=float)[:, :2]
    x, y = pts[:, 0], pts[:, 1]
    x1, y1 = np.roll(x, -1), np.roll(y, -1)
    cross = x * y1 - x1 * y
    a = cross.sum() / 2.0
    if a == 0:
        return 0.0, 0.0, 0.0
    cx = ((x + x1) * cross).sum() / (6.0 * a)
    cy = ((y + y1) * cross).sum() / (6.0 * a)
    return abs(a), abs(a) * cx, abs(a) * cy


def feature_centroid(feature: dict) -> Optional[Tuple[float, float]]:
    """Area-weighted (lon, lat) centroid of a Polygon/MultiPolygon; holes are subtracted.

    Planar in lon/lat, which is close enough for label placement.
    """
    geom = (feature or {}).get("geometry") or {}
    if geom.get("type") == "Polygon":
        polygons = [geom.get("coordinates") or []]
    elif geom.get("type") == "MultiPolygon":
        polygons = geom.get("coordinates") or []
    else:
        return None

    area = mx = my = 0.0
    vertices = []
    for rings in polygons:
        for i, ring in enumerate(rings):
            if len(ring) < 3:
                continue
            vertices.extend(p[:2] for p in ring)
            a, ax, ay = _ring_moments(ring)
            sign = 1.0 if i == 0 else -1.0   # first ring is the outline, the rest are holes
            area += sign * a
            mx += sign * ax
            my += sign * ay
    if not vertices:
        return None
    if area <= 0:
        lon, lat = np.asarray(vertices, dtype=float).mean(axis=0)
        return float(lon), float(lat)
    return float(mx / area), float(my / area)


def area_labels(features: List[dict]) -> List[AreaLabel]:
    """One label per feature with a usable geometry, placed at its centroid."""
    labels = []
    for feat in features:
        c = feature_centroid(feat)
        if c is None:
            continue
        labels.append(AreaLabel(text=feature_name(feat) or "Unnamed", lon=c[0], lat=c[1]))
    return labels


def build_choropleth(
    features: List[dict],
    index: TemporalIndex,
    variable_key: str,
    variable: Variable,
    normalize: Optional[Callable[[str], str]] = None,
) -> Optional[ChoroplethView]:
    """Join features to the index's current values and colour them.

    Returns None (after logging) when no entity has a defined value; callers
    keep whatever they drew last.
    """
    values = [v for v in (_finite(x) for x in index.current_values(variable_key).values()) if v is not None]
    if not values:
        logger.error("No data available for %s on the selected date", variable.label)
        return None

    lo, hi = min(values), max(values)
    scale = ColorScale(lo, hi, variable.colorscale)

    if normalize is None:
        lookup = index.entities
    else:
        lookup = {normalize(name): ent for name, ent in index.entities.items()}

    fills: List[FeatureFill] = []
    for feat in features:
        name = feature_name(feat)
        ent = lookup.get(normalize(name) if normalize else name)
        value = (_finite(ent.current.get(variable_key)) or 0.0) if ent is not None else 0.0
        fills.append(FeatureFill(
            name=name,
            fill=scale(value) if value > 0 else NO_DATA_FILL,
            value=value,
            region=(ent.current.get("region") or None) if ent is not None else None,
            matched=ent is not None,
        ))

    return ChoroplethView(
        variable=variable_key,
        label=variable.label,
        domain=(lo, hi),
        features=tuple(fills),
        legend=build_legend(scale, hi, variable),
    )


def tooltip_lines(feat: FeatureFill, variable: Variable) -> List[str]:
    """Name, region, formatted value, as shown on hover."""
    return [
        feat.name or "Unknown",
        f"Region: {feat.region or 'N/A'}",
        f"{variable.label}: {variable.format(feat.value)}",
    ]
