import json

import pandas as pd
import pytest
import requests

import data_loader
from data_loader import (
    DataLoadError,
    fetch_records,
    load_boundaries,
    load_demographics,
    parse_decimal,
    rollup_by_region,
)


@pytest.mark.parametrize("text, expected", [
    ("1234,5", 1234.5),
    ("1.234,5", 1234.5),
    ("0,731", 0.731),
    ("12.5", 12.5),
    ("660842", 660842.0),
    ("-729", -729.0),
    (" 36,0 ", 36.0),
    ("", 0.0),
    ("   ", 0.0),
    ("n/a", 0.0),
    ("nan", 0.0),
    (None, 0.0),
])
def test_parse_decimal(text, expected):
    assert parse_decimal(text) == pytest.approx(expected)


def test_load_demographics_parses_numeric_fields(csv_file):
    df = load_demographics(csv_file)
    assert list(df.columns) == ["region", "municipality", "date", "population_total", "median_age", "employment_rate"]
    assert len(df) == 3
    assert df["population_total"].tolist() == [660842.0, 666128.0, 222575.0]
    assert df["median_age"].iloc[0] == pytest.approx(36.0)
    assert df["employment_rate"].iloc[2] == pytest.approx(0.721)
    assert df["municipality"].tolist() == ["København", "København", "Aalborg"]


def test_load_demographics_empty_numeric_is_zero(tmp_path):
    p = tmp_path / "gaps.csv"
    p.write_text("region;municipality;date;births;deaths\nR;M;2024-01-01;;abc\n", encoding="utf-8")
    df = load_demographics(p)
    assert df.loc[0, "births"] == 0.0
    assert df.loc[0, "deaths"] == 0.0


def test_load_demographics_latin1_file(tmp_path):
    p = tmp_path / "cp1252.csv"
    p.write_bytes("region;municipality;date;births\nRegion Sjælland;Næstved;2024-01-01;438\n".encode("cp1252"))
    df = load_demographics(p)
    assert df.loc[0, "municipality"] == "Næstved"


def test_load_demographics_missing_file(tmp_path):
    with pytest.raises(DataLoadError):
        load_demographics(tmp_path / "nope.csv")


class _FakeResponse:
    def __init__(self, payload=None, status=200, text=None):
        self._payload = payload
        self.status_code = status
        self.text = text if text is not None else json.dumps(payload)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def test_fetch_records(monkeypatch):
    payload = [{"region": "R", "municipality": "M", "date": "2024-01-01", "births": 3.0}]
    monkeypatch.setattr(data_loader.requests, "get", lambda url, timeout: _FakeResponse(payload))
    df = fetch_records("http://localhost:3000/api/municipality-demographics")
    assert df.to_dict(orient="records") == payload


def test_fetch_records_http_error(monkeypatch):
    monkeypatch.setattr(data_loader.requests, "get", lambda url, timeout: _FakeResponse([], status=500))
    with pytest.raises(DataLoadError):
        fetch_records("http://localhost:3000/api/municipality-demographics")


def test_fetch_records_connection_error(monkeypatch):
    def boom(url, timeout):
        raise requests.ConnectionError("refused")
    monkeypatch.setattr(data_loader.requests, "get", boom)
    with pytest.raises(DataLoadError):
        fetch_records("http://localhost:1/api/municipality-demographics")


def test_fetch_records_rejects_non_array(monkeypatch):
    monkeypatch.setattr(data_loader.requests, "get", lambda url, timeout: _FakeResponse({"rows": []}))
    with pytest.raises(DataLoadError):
        fetch_records("http://example.test/api")


def test_load_boundaries_from_file(tmp_path, features):
    p = tmp_path / "b.geojson"
    p.write_text(json.dumps({"type": "FeatureCollection", "features": features}), encoding="utf-8")
    gj = load_boundaries(p)
    assert [f["properties"]["name"] for f in gj["features"]] == ["København", "Aalborg", "Atlantis"]


def test_load_boundaries_from_url(monkeypatch, features):
    gj = {"type": "FeatureCollection", "features": features}
    monkeypatch.setattr(data_loader.requests, "get", lambda url, timeout: _FakeResponse(gj))
    assert load_boundaries("https://example.test/dk.geojson")["features"] == features


def test_load_boundaries_rejects_other_geojson(tmp_path):
    p = tmp_path / "point.geojson"
    p.write_text(json.dumps({"type": "Point", "coordinates": [0, 0]}), encoding="utf-8")
    with pytest.raises(DataLoadError):
        load_boundaries(p)


def test_load_boundaries_invalid_json(tmp_path):
    p = tmp_path / "broken.geojson"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataLoadError):
        load_boundaries(p)


def test_rollup_by_region_sums_counts_and_averages_rates():
    df = pd.DataFrame([
        {"region": "R1", "municipality": "A", "date": "2024-01-01", "population_total": 100.0, "employment_rate": 0.7},
        {"region": "R1", "municipality": "B", "date": "2024-01-01", "population_total": 50.0, "employment_rate": 0.8},
        {"region": "R2", "municipality": "C", "date": "2024-01-01", "population_total": 10.0, "employment_rate": 0.6},
        {"region": "R1", "municipality": "A", "date": "2025-01-01", "population_total": 110.0, "employment_rate": 0.9},
    ])
    out = rollup_by_region(df)
    assert list(out.columns) == ["region", "date", "population_total", "employment_rate"]
    r1 = out[(out["region"] == "R1") & (out["date"] == "2024-01-01")].iloc[0]
    assert r1["population_total"] == 150.0
    assert r1["employment_rate"] == pytest.approx(0.75)
    assert len(out) == 3


def test_bundled_mock_data_loads():
    from config import DEMOGRAPHICS_CSV, REGION_GEOJSON

    df = load_demographics(DEMOGRAPHICS_CSV)
    assert set(df["date"]) == {"2024-01-01", "2024-07-01", "2025-01-01"}
    assert (df["population_total"] > 0).all()
    regions = {f["properties"]["name"] for f in load_boundaries(REGION_GEOJSON)["features"]}
    assert regions == set(df["region"])


def test_fetch_records_coerces_like_the_csv(monkeypatch):
    payload = [{"region": "R", "municipality": " M ", "date": "2024-01-01", "population_total": "1.234", "median_age": "36,5", "births": None}]
    monkeypatch.setattr(data_loader.requests, "get", lambda url, timeout: _FakeResponse(payload))
    df = fetch_records("http://localhost:3000/api/municipality-demographics")
    row = df.iloc[0]
    assert row["municipality"] == "M"
    assert row["population_total"] == pytest.approx(1.234)
    assert row["median_age"] == pytest.approx(36.5)
    assert row["births"] == 0.0
