"""Turn raw spreadsheet rows into typed customer records."""
from __future__ import annotations

import re
from datetime import datetime
from typing import Iterable, List, Mapping, Optional

from dateutil import parser as dateparser

from salesmap.observability.metrics import MetricsRegistry
from salesmap.settings import ColumnSettings
from salesmap.storage.models import CustomerRecord

Row = Mapping[str, Optional[str]]
RowTable = Iterable[Row]

DEFAULT_COLUMNS = ColumnSettings()

_DIGITS_RE = re.compile(r"[0-9]")

_DEFAULT_A = datetime(1900, 1, 1)
_DEFAULT_B = datetime(1901, 1, 1)


def _cell(row: Row, label: str) -> str:
    value = row.get(label)
    if value is None:
        return ""
    return str(value)


def parse_year(value: Optional[str]) -> Optional[int]:
    """Return the calendar year of a sale date, or None when it cannot be parsed."""
    if value is None or not str(value).strip():
        return None
    try:
        first = dateparser.parse(str(value), default=_DEFAULT_A)
        second = dateparser.parse(str(value), default=_DEFAULT_B)
    except (ValueError, OverflowError):
        return None
    # the year came from the default, not from the cell
    if first.year != second.year:
        return None
    return first.year


def strip_digits(city: str) -> str:
    return _DIGITS_RE.sub("", city)


def extract(
    rows: RowTable,
    columns: ColumnSettings = DEFAULT_COLUMNS,
    *,
    metrics: Optional[MetricsRegistry] = None,
) -> List[CustomerRecord]:
    """Build customer records from rows, dropping rows without a city.

    Rows whose sale date cannot be parsed are kept with ``year=None`` so they
    land in the unknown-year bucket downstream.
    """
    records: List[CustomerRecord] = []
    for row in rows:
        if metrics is not None:
            metrics.incr("rows_read")
        # a city made only of digits is as unusable as a missing one
        city = strip_digits(_cell(row, columns.city))
        if not city:
            if metrics is not None:
                metrics.incr("rows_skipped")
            continue
        year = parse_year(row.get(columns.sale_date))
        if year is None and metrics is not None:
            metrics.incr("dates_unparsable")
        records.append(
            CustomerRecord(
                city=city,
                year=year,
                name=f"{_cell(row, columns.given_name)} {_cell(row, columns.family_name)}",
                device=_cell(row, columns.device),
            )
        )
    if metrics is not None:
        metrics.incr("records_extracted", len(records))
    return records
