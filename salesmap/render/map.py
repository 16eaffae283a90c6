"""Folium rendering of resolved records as a filterable map with a side list."""
from __future__ import annotations

import html
import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import folium
import structlog

from salesmap.settings import MapSettings
from salesmap.storage.models import ResolvedRecord
from salesmap.view.filtering import FOCUS_ZOOM, YearFilter, apply_filter, focus, year_options

LOGGER = structlog.get_logger(__name__)

PANEL_ID = "salesmap-panel"
SELECT_ID = "salesmap-year"


class FoliumMapView:
    """Adapter that turns focus commands into a `setView` call in the page."""

    def __init__(self, fmap: folium.Map) -> None:
        self._map = fmap
        self.last_view: Optional[Tuple[Tuple[float, float], int]] = None

    def set_view(self, center: Tuple[float, float], zoom: int) -> None:
        self.last_view = (center, zoom)
        script = (
            "<script>document.addEventListener('DOMContentLoaded', function () {"
            f"{self._map.get_name()}.setView([{center[0]}, {center[1]}], {int(zoom)});"
            "});</script>"
        )
        self._map.get_root().html.add_child(folium.Element(script))


def _text(value: str) -> str:
    """HTML-escape user text, template braces included."""
    return html.escape(value).replace("{", "&#123;").replace("}", "&#125;")


def ring_icon(color_hex: str, size_px: int = 24) -> folium.DivIcon:
    html_body = (
        f'<div style="width:{size_px}px;height:{size_px}px;box-sizing:border-box;'
        f"border:8px solid {color_hex};background:#fff;border-radius:50%;"
        'transform:translate(-50%,-50%);box-shadow:0 0 5px 1px rgba(0,0,0,.75);"></div>'
    )
    return folium.DivIcon(html=html_body, icon_size=(0, 0))


def record_html(record: ResolvedRecord) -> str:
    """Year, name, device and city block shared by popups and list entries."""
    return (
        f'<time datetime="{_text(record.year_key)}">{_text(record.year_key)}</time>'
        f"<h3 style=\"margin:0;font-weight:700\">{_text(record.name)}</h3>"
        f"<span>{_text(record.device)}</span><br><span>{_text(record.city)}</span>"
    )


def _list_item(record: ResolvedRecord, color: str, visible: bool) -> str:
    attrs = ['class="salesmap-item"', f'data-year="{_text(record.year_key)}"']
    if record.location is not None:
        attrs.append(f'data-lat="{record.location.lat}"')
        attrs.append(f'data-lng="{record.location.lng}"')
    style = f"border-left:8px solid {color};padding-left:1em;margin-bottom:1em;cursor:pointer;"
    if not visible:
        style += "display:none;"
    return f'<li {" ".join(attrs)} style="{style}">{record_html(record)}</li>'


def _panel_html(
    records: Sequence[ResolvedRecord],
    colors: Dict[str, str],
    visible_ids: set[int],
    *,
    title: str,
    selected: str,
) -> str:
    options = ['<option value="">---</option>']
    for key in year_options(colors):
        chosen = " selected" if key == selected else ""
        options.append(f'<option value="{_text(key)}"{chosen}>{_text(key)}</option>')
    items = [_list_item(record, colors[record.year_key], id(record) in visible_ids) for record in records]
    return (
        f'<nav id="{PANEL_ID}" style="position:fixed;top:0;left:0;bottom:0;width:40ch;z-index:1000;'
        'overflow-y:auto;background:#fff;padding:1em 2em;font-family:system-ui,sans-serif;">'
        f"<h1>{_text(title)}</h1>"
        f'<label>Filtrovat rok:<br><select id="{SELECT_ID}">{"".join(options)}</select></label>'
        f'<ul style="list-style:none;padding:0">{"".join(items)}</ul></nav>'
    )


def _panel_script(fmap: folium.Map, groups: Dict[str, folium.FeatureGroup]) -> str:
    group_refs = ", ".join(f"{json.dumps(key)}: {group.get_name()}" for key, group in groups.items())
    return f"""
<script>
document.addEventListener("DOMContentLoaded", function () {{
  var map = {fmap.get_name()};
  var groups = {{{group_refs}}};
  var select = document.getElementById("{SELECT_ID}");
  var items = document.querySelectorAll(".salesmap-item");
  function applyYear(value) {{
    items.forEach(function (item) {{
      item.style.display = (value === "" || item.dataset.year === value) ? "" : "none";
    }});
    Object.keys(groups).forEach(function (key) {{
      if (value === "" || key === value) {{ map.addLayer(groups[key]); }}
      else {{ map.removeLayer(groups[key]); }}
    }});
  }}
  select.addEventListener("change", function () {{ applyYear(select.value); }});
  items.forEach(function (item) {{
    if (item.dataset.lat === undefined) {{ return; }}
    item.addEventListener("click", function () {{
      map.setView([parseFloat(item.dataset.lat), parseFloat(item.dataset.lng)], {FOCUS_ZOOM});
    }});
  }});
}});
</script>
"""


def render_map(
    records: Sequence[ResolvedRecord],
    colors: Dict[str, str],
    *,
    settings: MapSettings,
    year_filter: YearFilter = None,
    focus_first: bool = False,
) -> folium.Map:
    """Build the map: one feature group per year, a marker per located record."""
    visible = list(apply_filter(records, year_filter))
    visible_ids = {id(record) for record in visible}
    selected = "" if year_filter is None else str(year_filter).strip()

    fmap = folium.Map(
        location=[settings.home_lat, settings.home_lng],
        zoom_start=settings.zoom_start,
        tiles=settings.tiles,
    )
    groups: Dict[str, folium.FeatureGroup] = {}
    for key in year_options(colors):
        groups[key] = folium.FeatureGroup(name=key, show=selected in ("", key)).add_to(fmap)

    markers = 0
    for record in records:
        if record.location is None:
            continue
        folium.Marker(
            [record.location.lat, record.location.lng],
            icon=ring_icon(colors[record.year_key]),
            popup=folium.Popup(record_html(record), max_width=320),
        ).add_to(groups[record.year_key])
        markers += 1

    root = fmap.get_root()
    root.html.add_child(folium.Element(_panel_html(records, colors, visible_ids, title=settings.title, selected=selected)))
    root.html.add_child(folium.Element(_panel_script(fmap, groups)))

    if focus_first:
        located: List[ResolvedRecord] = [record for record in visible if record.location is not None]
        if located:
            focus(FoliumMapView(fmap), located[0])

    LOGGER.info("map_rendered", records=len(records), visible=len(visible), markers=markers, years=len(groups))
    return fmap


def write_map(fmap: folium.Map, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fmap.save(str(path))
    return path
