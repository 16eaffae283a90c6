import pytest

from salesmap.storage.models import ResolvedRecord
from salesmap.view.colors import PALETTE, assign_colors


def _records(years):
    return [ResolvedRecord(city="Brno", year=year, name="x", device="TV") for year in years]


def test_palette_has_twenty_distinct_entries():
    assert len(PALETTE) == 20
    assert len(set(PALETTE)) == 20


def test_assign_colors_in_first_seen_order():
    records = _records([2019, 2019, 2020, 2021, 2021, None])
    colors = assign_colors(records)
    assert list(colors) == ["2019", "2020", "2021", "unknown"]
    assert colors["2019"] == PALETTE[0]
    assert colors["2020"] == PALETTE[1]
    assert colors["unknown"] == PALETTE[3]


def test_assign_colors_is_deterministic():
    records = _records([2018, 2019, 2019, 2022])
    assert assign_colors(records) == assign_colors(records)


def test_distinct_years_get_distinct_colors_until_palette_runs_out():
    records = _records(range(2000, 2025))
    colors = assign_colors(records)
    first_twenty = [colors[str(year)] for year in range(2000, 2020)]
    assert len(set(first_twenty)) == 20
    assert colors["2020"] == colors["2000"]


def test_empty_palette_is_rejected():
    with pytest.raises(ValueError):
        assign_colors(_records([2020]), palette=())
