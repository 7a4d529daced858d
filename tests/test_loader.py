"""Tests for loading price series from files."""
import json
from datetime import datetime

import pytest

from stratbench.backtest.snapshot import sort_records
from stratbench.data.loader import load_price_series


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


class TestCsv:
    def test_basic(self, tmp_path):
        path = _write(tmp_path, "prices.csv", (
            "timestamp,price,volume\n"
            "2024-01-01 00:00:00,100.5,10\n"
            "2024-01-01 01:00:00,101.0,12\n"
        ))
        records = load_price_series(path)
        assert [r.price for r in records] == [100.5, 101.0]
        assert records[0].timestamp == datetime(2024, 1, 1)
        assert records[1].volume == 12

    def test_aliases_and_case(self, tmp_path):
        path = _write(tmp_path, "ohlc.csv", (
            "Date,Open,Close\n"
            "2024-01-02,99,100\n"
        ))
        records = load_price_series(path)
        assert records[0].price == 100.0
        assert records[0].timestamp == datetime(2024, 1, 2)
        assert records[0].volume == 0.0

    def test_epoch_seconds(self, tmp_path):
        path = _write(tmp_path, "epoch.csv", "timestamp,price\n1704067200,42\n")
        assert load_price_series(path)[0].timestamp == datetime(2024, 1, 1)

    def test_extra_columns_kept(self, tmp_path):
        path = _write(tmp_path, "signals.csv", "timestamp,price,final_score\n2024-01-01,100,70\n")
        assert load_price_series(path)[0].final_score == 70

    def test_rows_without_price_dropped(self, tmp_path):
        path = _write(tmp_path, "gaps.csv", "timestamp,price\n2024-01-01,100\n2024-01-02,\n2024-01-03,102\n")
        assert [r.price for r in load_price_series(path)] == [100.0, 102.0]

    def test_rows_without_timestamp_dropped(self, tmp_path):
        path = _write(tmp_path, "blank_ts.csv", (
            "timestamp,price\n"
            "2024-01-03,3\n"
            ",9\n"
            "2024-01-01,1\n"
            "2024-01-02,2\n"
        ))
        records = load_price_series(path)
        assert [r.price for r in records] == [3.0, 1.0, 2.0]
        assert [r.price for r in sort_records(records)] == [1.0, 2.0, 3.0]

    def test_unparseable_timestamp_dropped(self, tmp_path):
        path = _write(tmp_path, "bad_ts.csv", "timestamp,price\n2024-01-01,1\nnot a date,2\n")
        assert [r.price for r in load_price_series(path)] == [1.0]

    def test_offset_timestamps_stored_as_naive_utc(self, tmp_path):
        path = _write(tmp_path, "tz.csv", "timestamp,price\n2024-01-01T03:00:00+02:00,1\n")
        ts = load_price_series(path)[0].timestamp
        assert ts == datetime(2024, 1, 1, 1)
        assert ts.tzinfo is None

    def test_file_order_kept(self, tmp_path):
        path = _write(tmp_path, "unsorted.csv", "timestamp,price\n2024-01-03,3\n2024-01-01,1\n")
        assert [r.price for r in load_price_series(path)] == [3.0, 1.0]

    def test_missing_column(self, tmp_path):
        path = _write(tmp_path, "bad.csv", "timestamp,volume\n2024-01-01,5\n")
        with pytest.raises(ValueError, match="missing required columns"):
            load_price_series(path)


class TestJson:
    def test_records_list(self, tmp_path):
        path = _write(tmp_path, "prices.json", json.dumps([
            {"timestamp": "2024-01-01T00:00:00", "price": 100.0, "volume": 5},
            {"timestamp": "2024-01-01T01:00:00", "price": 99.0, "volume": 7},
        ]))
        records = load_price_series(path)
        assert [r.price for r in records] == [100.0, 99.0]
        assert records[1].timestamp == datetime(2024, 1, 1, 1)


class TestFormat:
    def test_unsupported_extension(self, tmp_path):
        path = _write(tmp_path, "prices.txt", "timestamp,price\n")
        with pytest.raises(ValueError, match="Unsupported price file format"):
            load_price_series(path)
