import pytest

from salesmap.storage.models import GeoPoint, ResolvedRecord
from salesmap.view.filtering import FOCUS_ZOOM, apply_filter, focus, normalise_filter, year_options


def _record(year, location=None, name="x"):
    return ResolvedRecord(city="Brno", year=year, name=name, device="TV", location=location)


RECORDS = [_record(2019, name="a"), _record(2020, name="b"), _record(2019, name="c"), _record(None, name="d")]


class RecordingView:
    def __init__(self):
        self.calls = []

    def set_view(self, center, zoom):
        self.calls.append((center, zoom))


def test_empty_filter_returns_records_unchanged():
    assert apply_filter(RECORDS, "") is RECORDS
    assert apply_filter(RECORDS, None) is RECORDS


def test_year_filter_selects_exact_subset():
    assert [record.name for record in apply_filter(RECORDS, "2019")] == ["a", "c"]
    assert [record.name for record in apply_filter(RECORDS, 2020)] == ["b"]
    assert apply_filter(RECORDS, "1999") == []


def test_unknown_filter_selects_undated_records():
    assert [record.name for record in apply_filter(RECORDS, "unknown")] == ["d"]


def test_invalid_filter_is_rejected():
    with pytest.raises(ValueError):
        apply_filter(RECORDS, "last year")


def test_year_options_follow_color_order():
    assert year_options({"2019": "#1", "2020": "#2"}) == ["2019", "2020"]


def test_focus_recenters_on_location():
    view = RecordingView()
    assert focus(view, _record(2020, GeoPoint(lat=49.0, lng=17.1)))
    assert view.calls == [((49.0, 17.1), FOCUS_ZOOM)]


def test_focus_ignores_records_without_location():
    view = RecordingView()
    assert not focus(view, _record(2020))
    assert view.calls == []


def test_normalise_filter_forms():
    assert normalise_filter(None) == (False, None)
    assert normalise_filter(" ") == (False, None)
    assert normalise_filter("unknown") == (True, None)
    assert normalise_filter("2021") == (True, 2021)
    with pytest.raises(ValueError):
        normalise_filter("abc")
