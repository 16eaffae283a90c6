"""Year filtering of the resolved set and map focus commands."""
from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Sequence, Tuple, TypeVar, Union

from salesmap.storage.models import UNKNOWN_YEAR_KEY, CustomerRecord, ResolvedRecord

FOCUS_ZOOM = 14

RecordT = TypeVar("RecordT", bound=CustomerRecord)
YearFilter = Union[int, str, None]


class MapView(Protocol):
    def set_view(self, center: Tuple[float, float], zoom: int) -> None:
        ...


def normalise_filter(year_filter: YearFilter) -> Tuple[bool, Optional[int]]:
    """Return (active, year); year None with active True selects unknown years."""
    if year_filter is None:
        return False, None
    if isinstance(year_filter, int):
        return True, year_filter
    text = str(year_filter).strip()
    if not text:
        return False, None
    if text == UNKNOWN_YEAR_KEY:
        return True, None
    try:
        return True, int(text)
    except ValueError as exc:
        raise ValueError(f"Invalid year filter: {year_filter!r}") from exc


def apply_filter(records: Sequence[RecordT], year_filter: YearFilter) -> Sequence[RecordT]:
    """Return the records matching ``year_filter``; an empty filter returns ``records`` itself."""
    active, year = normalise_filter(year_filter)
    if not active:
        return records
    return [record for record in records if record.year == year]


def year_options(colors: Dict[str, str]) -> List[str]:
    """Selector entries, in colour assignment order."""
    return list(colors)


def focus(view: MapView, record: ResolvedRecord, zoom: int = FOCUS_ZOOM) -> bool:
    """Recenter ``view`` on the record; does nothing when it has no location."""
    if record.location is None:
        return False
    view.set_view((record.location.lat, record.location.lng), zoom)
    return True
