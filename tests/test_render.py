from salesmap.render.map import FoliumMapView, render_map, write_map
from salesmap.settings import MapSettings
from salesmap.storage.models import GeoPoint, ResolvedRecord
from salesmap.view.colors import assign_colors

RECORDS = (
    ResolvedRecord(city="Kyjov ", year=2021, name="Jan Novák", device="TV", location=GeoPoint(49.01, 17.12)),
    ResolvedRecord(city="Atlantis", year=2021, name="Eva <Nová>", device="Rádio", location=None),
    ResolvedRecord(city="Brno", year=2022, name="Petr Malý", device="PC", location=GeoPoint(49.19, 16.60)),
)


def _map(**kwargs):
    return render_map(RECORDS, assign_colors(RECORDS), settings=MapSettings(), **kwargs)


def _html(**kwargs):
    fmap = _map(**kwargs)
    return fmap, fmap.get_root().render()


def test_render_map_lists_all_records_and_marks_located_ones():
    _, page = _html()
    assert page.count("L.marker(") == 2
    assert page.count('class="salesmap-item"') == 3
    assert "Eva &lt;Nová&gt;" in page
    assert '<option value="2021">2021</option>' in page
    assert '<option value="2022">2022</option>' in page


def test_render_map_hides_entries_outside_initial_filter():
    _, page = _html(year_filter="2022")
    assert '<option value="2022" selected>' in page
    assert page.count('display:none;"') == 2


def test_focus_first_recenters_on_first_located_record():
    fmap, page = _html(focus_first=True)
    assert f"{fmap.get_name()}.setView([49.01, 17.12], 14)" in page


def test_map_view_records_last_view():
    fmap = _map()
    view = FoliumMapView(fmap)
    view.set_view((1.0, 2.0), 9)
    assert view.last_view == ((1.0, 2.0), 9)


def test_write_map_creates_file(tmp_path):
    fmap = _map()
    target = write_map(fmap, tmp_path / "out" / "map.html")
    assert target.exists()
    assert "salesmap-panel" in target.read_text(encoding="utf-8")
