from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

from salesmap.ingest import spreadsheet
from salesmap.ingest.spreadsheet import SpreadsheetError, read_rows


def test_read_rows_renders_cells_as_text(monkeypatch):
    frame = pd.DataFrame(
        {
            " Bydliště ": ["Kyjov 12", None],
            "Datum prodeje": [datetime(2021, 5, 1), float("nan")],
            "Jméno": ["Jan", "Eva"],
            "PSČ": [69701.0, 62800.0],
        }
    )
    captured = {}

    def fake_read_excel(path, **kwargs):
        captured.update(kwargs)
        return frame

    monkeypatch.setattr(spreadsheet.pd, "read_excel", fake_read_excel)
    rows = read_rows(Path("sales.ods"))

    assert captured["engine"] == "odf"
    assert rows[0] == {"Bydliště": "Kyjov 12", "Datum prodeje": "2021-05-01", "Jméno": "Jan", "PSČ": "69701"}
    assert rows[1]["Bydliště"] is None
    assert rows[1]["Datum prodeje"] is None


def test_read_rows_wraps_missing_file(tmp_path):
    with pytest.raises(SpreadsheetError):
        read_rows(tmp_path / "missing.ods")


def test_read_rows_wraps_non_opendocument_file(tmp_path):
    path = tmp_path / "sales.ods"
    path.write_text("not a spreadsheet", encoding="utf-8")
    with pytest.raises(SpreadsheetError):
        read_rows(path)
