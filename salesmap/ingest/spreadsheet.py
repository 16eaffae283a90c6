"""Read OpenDocument sales exports into rows of text cells."""
from __future__ import annotations

import zipfile
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional
from xml.sax import SAXException

import pandas as pd
import structlog

LOGGER = structlog.get_logger(__name__)

DATE_FORMAT = "%Y-%m-%d"


class SpreadsheetError(ValueError):
    """Raised when the input document cannot be read."""


def _as_text(value: object) -> Optional[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, (datetime, date)):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def read_rows(path: Path, *, sheet: int | str = 0) -> List[Dict[str, Optional[str]]]:
    """Return the rows of the first sheet keyed by header label.

    Date cells are rendered as ``yyyy-mm-dd`` and empty cells as None.
    """
    try:
        frame = pd.read_excel(path, sheet_name=sheet, engine="odf", dtype=object)
    except (OSError, ValueError, KeyError, zipfile.BadZipFile, SAXException) as exc:
        raise SpreadsheetError(f"Unable to read spreadsheet {path}: {exc}") from exc
    frame.columns = [str(column).strip() for column in frame.columns]
    rows = [
        {label: _as_text(value) for label, value in record.items()}
        for record in frame.to_dict(orient="records")
    ]
    LOGGER.info("spreadsheet_read", path=str(path), rows=len(rows), columns=list(frame.columns))
    return rows
