import pytest

from filters import (
    FilterState,
    apply_filters,
    municipality_options,
    region_options,
    year_options,
)


def test_options(table_records):
    assert region_options(table_records) == ["Region Hovedstaden", "Region Nordjylland"]
    assert municipality_options(table_records) == ["Aalborg", "Frederiksberg", "Hjørring", "København"]
    assert year_options(table_records) == [2024, 2025]


def test_region_restricts_municipality_options(table_records):
    assert municipality_options(table_records, "Region Nordjylland") == ["Aalborg", "Hjørring"]
    assert municipality_options(table_records, None) == municipality_options(table_records)


def test_no_constraint_returns_complete_set(table_records):
    out = apply_filters(table_records, FilterState())
    assert out.equals(table_records)


@pytest.mark.parametrize("state", [
    FilterState(region="Region Hovedstaden"),
    FilterState(municipality="København"),
    FilterState(year=2025),
    FilterState(region="Region Nordjylland", year=2024),
    FilterState(region="Region Nordjylland", municipality="København"),
])
def test_filtered_view_is_subset(table_records, state):
    out = apply_filters(table_records, state)
    assert set(out.index) <= set(table_records.index)
    for _, row in out.iterrows():
        if state.region:
            assert row["region"] == state.region
        if state.municipality:
            assert row["municipality"] == state.municipality


def test_filters_combine_with_and(table_records):
    out = apply_filters(table_records, FilterState(region="Region Hovedstaden", year=2025))
    assert out["municipality"].tolist() == ["København"]
    assert out["date"].tolist() == ["2025-01-01"]


def test_contradictory_filters_give_empty_view(table_records):
    out = apply_filters(table_records, FilterState(region="Region Nordjylland", municipality="København"))
    assert out.empty


def test_with_region_clears_municipality_outside_region(table_records):
    state = FilterState(municipality="København")
    moved = state.with_region("Region Nordjylland", table_records)
    assert moved == FilterState(region="Region Nordjylland")


def test_with_region_keeps_municipality_inside_region(table_records):
    state = FilterState(municipality="Aalborg")
    assert state.with_region("Region Nordjylland", table_records).municipality == "Aalborg"


def test_with_year_accepts_strings(table_records):
    assert FilterState().with_year("2024").year == 2024
    assert FilterState(year=2024).with_year(None).year is None
