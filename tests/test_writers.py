"""Tests for the CSV / JSON writers and output file naming."""

from __future__ import annotations

import csv
import datetime as dt
import io
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import bar_timestamp
from yfp.errors import SerializationFailed
from yfp.schemas.ohlcv import FIELDS, OHLCVRecord
from yfp.writers.base import prepare_file_name
from yfp.writers.csv_file import CSVWriter
from yfp.writers.json_file import JSONWriter


@pytest.fixture()
def records() -> list[OHLCVRecord]:
    return [
        OHLCVRecord(
            timestamp=bar_timestamp(dt.date(2020, 12, 24)),
            open=1.0, high=2.0, low=0.5, close=1.5, adj_close=1.4, volume=100,
        ),
        OHLCVRecord(
            timestamp=bar_timestamp(dt.date(2020, 12, 28)),
            open=1.5, high=2.5, low=1.0, close=2.0, adj_close=2.0, volume=150,
        ),
    ]


def _read_csv_back(text: str) -> list[dict]:
    """Test-only inverse of CSVWriter.render."""
    rows = []
    for row in csv.DictReader(io.StringIO(text)):
        rows.append({
            "date": dt.datetime.strptime(row["date"], "%b %d, %Y").date(),
            "open": float(row["open"]),
            "high": float(row["high"]),
            "low": float(row["low"]),
            "close": float(row["close"]),
            "adj_close": float(row["adj_close"]),
            "volume": int(row["volume"]),
        })
    return rows


# =====================================================================
# CSV
# =====================================================================


class TestCSVWriter:
    def test_header_row(self, records):
        text = CSVWriter().render(records)
        assert text.splitlines()[0] == "date,open,high,low,close,adj_close,volume"

    def test_one_row_per_record(self, records):
        text = CSVWriter().render(records)
        assert len(text.splitlines()) == 1 + len(records)

    def test_human_date_in_date_column(self, records):
        text = CSVWriter().render(records)
        assert '"Dec 24, 2020"' in text

    def test_round_trip(self, records):
        rows = _read_csv_back(CSVWriter().render(records))
        assert len(rows) == len(records)
        for row, record in zip(rows, records):
            assert row["date"] == record.date
            for field in ("open", "high", "low", "close", "adj_close", "volume"):
                assert row[field] == getattr(record, field)

    def test_empty_records_header_only(self):
        text = CSVWriter().render([])
        assert text.strip() == ",".join(FIELDS)

    def test_write_appends_extension(self, tmp_path: Path, records):
        path = CSVWriter().write(records, tmp_path / "out")
        assert path == tmp_path / "out.csv"
        assert path.read_text().startswith("date,")

    def test_write_keeps_existing_extension(self, tmp_path: Path, records):
        path = CSVWriter().write(records, tmp_path / "out.csv")
        assert path == tmp_path / "out.csv"

    def test_dotted_ticker_name_still_gets_extension(self, tmp_path: Path, records):
        path = CSVWriter().write(records, tmp_path / "yfp_BRK.B_2020-01-01")
        assert path.name == "yfp_BRK.B_2020-01-01.csv"


# =====================================================================
# JSON
# =====================================================================


class TestJSONWriter:
    def test_array_of_objects(self, records):
        data = json.loads(JSONWriter().render(records))
        assert isinstance(data, list)
        assert len(data) == 2

    def test_field_names_and_order(self, records):
        data = json.loads(JSONWriter().render(records))
        assert list(data[0].keys()) == list(FIELDS)

    def test_values(self, records):
        first = json.loads(JSONWriter().render(records))[0]
        assert first == {
            "date": "Dec 24, 2020",
            "open": 1.0,
            "high": 2.0,
            "low": 0.5,
            "close": 1.5,
            "adj_close": 1.4,
            "volume": 100,
        }

    def test_order_preserved(self, records):
        data = json.loads(JSONWriter().render(records))
        assert [r["date"] for r in data] == ["Dec 24, 2020", "Dec 28, 2020"]

    def test_full_float_precision_kept(self):
        record = OHLCVRecord(
            timestamp=bar_timestamp(dt.date(2020, 1, 2)),
            open=299.0799865722656, high=300.5799865722656, low=298.0,
            close=274.0, adj_close=273.5899963378906, volume=2_178_300,
        )
        row = json.loads(JSONWriter().render([record]))[0]
        assert row["open"] == 299.0799865722656
        assert row["adj_close"] == 273.5899963378906

    def test_json_and_csv_agree(self):
        record = OHLCVRecord(
            timestamp=bar_timestamp(dt.date(2020, 1, 2)),
            open=299.0799865722656, high=300.5799865722656, low=298.0,
            close=274.0, adj_close=273.5899963378906, volume=2_178_300,
        )
        from_json = json.loads(JSONWriter().render([record]))[0]
        from_csv = _read_csv_back(CSVWriter().render([record]))[0]
        for field in ("open", "high", "low", "close", "adj_close", "volume"):
            assert from_json[field] == from_csv[field]

    def test_empty_records_empty_array(self):
        assert json.loads(JSONWriter().render([])) == []

    def test_write(self, tmp_path: Path, records):
        path = JSONWriter({"indent": 4}).write(records, tmp_path / "out")
        assert path.suffix == ".json"
        assert len(json.loads(path.read_text())) == 2


# =====================================================================
# Writing failures
# =====================================================================


class TestWriteFailures:
    def test_creates_parent_dirs(self, tmp_path: Path, records):
        path = CSVWriter().write(records, tmp_path / "deep" / "nested" / "out")
        assert path.exists()

    def test_unwritable_path_raises(self, tmp_path: Path, records):
        blocker = tmp_path / "blocker"
        blocker.write_text("I am a file, not a directory")
        with pytest.raises(SerializationFailed, match="Could not write"):
            JSONWriter().write(records, blocker / "deep" / "out")

    def test_no_temp_files_left_behind(self, tmp_path: Path, records):
        CSVWriter().write(records, tmp_path / "out")
        assert [p.name for p in tmp_path.iterdir()] == ["out.csv"]

    def test_overwrites_existing_file(self, tmp_path: Path, records):
        target = tmp_path / "out.csv"
        target.write_text("stale")
        CSVWriter().write(records, tmp_path / "out")
        assert "stale" not in target.read_text()


# =====================================================================
# File naming
# =====================================================================


class TestPrepareFileName:
    def test_auto_name(self):
        name = prepare_file_name(
            "VOO", "2020-01-01", "2024-01-01", "daily", None, today=dt.date(2025, 2, 9)
        )
        assert name == "yfp_VOO_2020-01-01_2024-01-01_daily_2025-02-09"

    def test_auto_name_without_end(self):
        name = prepare_file_name("VOO", "2020-01-01", None, "monthly")
        assert name.startswith("yfp_VOO_2020-01-01_today_monthly_")

    def test_auto_name_uses_utc_clock(self):
        with patch("yfp.writers.base.utc_today", return_value=dt.date(2025, 2, 9)):
            name = prepare_file_name("VOO", "2020-01-01", None, "daily")
        assert name == "yfp_VOO_2020-01-01_today_daily_2025-02-09"

    def test_given_name_wins(self):
        name = prepare_file_name("VOO", "2020-01-01", "2024-01-01", "daily", "proper_name")
        assert name == "proper_name"
