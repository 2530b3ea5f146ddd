import pandas as pd
import pytest

from config import Variable
from data_loader import normalize_records


HEADER = "region;municipality;date;population_total;median_age;employment_rate"


@pytest.fixture
def csv_file(tmp_path):
    p = tmp_path / "demo.csv"
    p.write_text(
        "\n".join([
            HEADER,
            "Region Hovedstaden;København;2024-01-01;660842;36,0;0,731",
            "Region Hovedstaden;København;2025-01-01;666128;36,2;0,735",
            "Region Nordjylland;Aalborg;2024-01-01;222575;37,2;0,721",
        ]) + "\n",
        encoding="utf-8",
    )
    return p


@pytest.fixture
def records():
    """Three records: two municipalities, København with two dates."""
    raw = pd.DataFrame([
        {"region": "Region Hovedstaden", "municipality": "København", "date": "2024-01-01",
         "population_total": "660842", "median_age": "36,0", "employment_rate": "0,731"},
        {"region": "Region Hovedstaden", "municipality": "København", "date": "2025-01-01",
         "population_total": "666128", "median_age": "36,2", "employment_rate": "0,735"},
        {"region": "Region Nordjylland", "municipality": "Aalborg", "date": "2024-01-01",
         "population_total": "222575", "median_age": "37,2", "employment_rate": "0,721"},
    ])
    return normalize_records(raw)


@pytest.fixture
def table_records():
    return pd.DataFrame([
        {"region": "Region Hovedstaden", "municipality": "København", "date": "2024-01-01", "population_total": 660842.0},
        {"region": "Region Hovedstaden", "municipality": "Frederiksberg", "date": "2024-07-01", "population_total": 105187.0},
        {"region": "Region Hovedstaden", "municipality": "København", "date": "2025-01-01", "population_total": 666128.0},
        {"region": "Region Nordjylland", "municipality": "Aalborg", "date": "2024-01-01", "population_total": 222575.0},
        {"region": "Region Nordjylland", "municipality": "Hjørring", "date": "2025-01-01", "population_total": 63837.0},
    ])


def _square(x, y):
    return {"type": "Polygon", "coordinates": [[[x, y], [x, y + 1], [x + 1, y + 1], [x + 1, y], [x, y]]]}


@pytest.fixture
def features():
    return [
        {"type": "Feature", "properties": {"name": "København"}, "geometry": _square(12, 55)},
        {"type": "Feature", "properties": {"name": "Aalborg"}, "geometry": _square(9, 57)},
        {"type": "Feature", "properties": {"name": "Atlantis"}, "geometry": _square(0, 0)},
    ]


@pytest.fixture
def population_variable():
    return Variable("Total Population", lambda v: f"{int(v):,}", ["#000000", "#ffffff"])
