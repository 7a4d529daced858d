"""Tests for MarketSnapshotBuilder and record sorting."""
from datetime import datetime, timedelta

import pandas as pd
import pytest
from pydantic import ValidationError

from stratbench.backtest.snapshot import DEFAULT_SPREAD, MarketSnapshotBuilder, sort_records
from stratbench.data.models import PriceRecord

T0 = datetime(2024, 1, 1)


def _make_records(prices, step=timedelta(hours=1)):
    return [
        PriceRecord(timestamp=T0 + i * step, price=p, volume=1_000)
        for i, p in enumerate(prices)
    ]


class TestSortRecords:
    def test_sorts_by_timestamp(self):
        records = _make_records([1.0, 2.0, 3.0])
        shuffled = [records[2], records[0], records[1]]
        assert sort_records(shuffled) == records

    def test_does_not_mutate_input(self):
        records = _make_records([1.0, 2.0, 3.0])
        shuffled = [records[2], records[0], records[1]]
        original = list(shuffled)
        sort_records(shuffled)
        assert shuffled == original

    def test_ties_keep_input_order(self):
        a = PriceRecord(timestamp=T0, price=1.0)
        b = PriceRecord(timestamp=T0, price=2.0)
        c = PriceRecord(timestamp=T0 - timedelta(hours=1), price=3.0)
        assert [r.price for r in sort_records([a, b, c])] == [3.0, 1.0, 2.0]
        assert [r.price for r in sort_records([b, a, c])] == [3.0, 2.0, 1.0]

    def test_accepts_dicts(self):
        result = sort_records([
            {"timestamp": "2024-01-02T00:00:00", "price": 2.0, "volume": 5},
            {"timestamp": "2024-01-01T00:00:00", "price": 1.0, "volume": 5},
        ])
        assert [r.price for r in result] == [1.0, 2.0]
        assert all(isinstance(r, PriceRecord) for r in result)

    def test_skips_invalid_records(self):
        result = sort_records([
            {"timestamp": "2024-01-01T00:00:00", "price": 1.0},
            {"timestamp": "2024-01-02T00:00:00", "price": "not a number"},
            {"timestamp": "2024-01-03T00:00:00", "price": float("nan")},
        ])
        assert [r.price for r in result] == [1.0]

    def test_is_idempotent(self):
        records = _make_records([5.0, 4.0, 3.0])[::-1]
        once = sort_records(records)
        assert sort_records(once) == once


class TestPriceRecord:
    def test_extra_signal_fields_kept(self):
        r = PriceRecord(timestamp=T0, price=1.0, final_score=70)
        assert r.final_score == 70

    def test_frozen(self):
        r = PriceRecord(timestamp=T0, price=1.0)
        with pytest.raises(ValidationError):
            r.price = 2.0


class TestBuilder:
    def test_snapshot_fields(self):
        builder = MarketSnapshotBuilder(_make_records([100.0 + i for i in range(30)]), symbol="BTC")
        snap = builder.build(29)

        assert snap.symbol == "BTC"
        assert snap.timestamp == T0 + timedelta(hours=29)
        assert snap.current_price == 129.0
        assert snap.volume == 1_000
        assert snap.spread == DEFAULT_SPREAD
        assert snap.support == pytest.approx(110.0 * 0.98)
        assert snap.resistance == pytest.approx(129.0 * 1.02)
        assert snap.trend.direction == "up"
        assert snap.rsi == 100.0
        assert snap.bollinger.current == 129.0
        assert snap.moving_averages.sma20 == pytest.approx(119.5)

    def test_first_step_uses_defaults(self):
        builder = MarketSnapshotBuilder(_make_records([100.0, 101.0]))
        snap = builder.build(0)
        assert snap.volatility == 0.0
        assert snap.rsi == 50.0
        assert snap.trend.direction == "neutral"
        assert snap.bollinger.upper == 0.0

    def test_spread_is_constant(self):
        builder = MarketSnapshotBuilder(_make_records([100.0, 150.0, 80.0]))
        assert {builder.build(i).spread for i in range(3)} == {DEFAULT_SPREAD}

    def test_snapshot_is_immutable(self):
        builder = MarketSnapshotBuilder(_make_records([100.0]))
        snap = builder.build(0)
        with pytest.raises(ValidationError):
            snap.current_price = 1.0

    def test_rebuild_is_identical(self):
        builder = MarketSnapshotBuilder(_make_records([100.0 + (i % 5) for i in range(40)]))
        assert builder.build(35) == builder.build(35)
        assert len(builder) == 40


class TestTimestampNormalization:
    def test_epoch_and_naive_iso_sort_together(self):
        result = sort_records([
            {"timestamp": 1704070800, "price": 101.0},
            {"timestamp": "2024-01-01T00:00:00", "price": 100.0},
        ])
        assert [r.price for r in result] == [100.0, 101.0]
        assert result[1].timestamp == datetime(2024, 1, 1, 1)

    def test_aware_timestamp_stored_as_naive_utc(self):
        r = PriceRecord(timestamp="2024-01-01T03:00:00+02:00", price=1.0)
        assert r.timestamp == datetime(2024, 1, 1, 1)
        assert r.timestamp.tzinfo is None

    def test_missing_timestamp_skipped(self):
        result = sort_records([
            {"timestamp": "2024-01-02T00:00:00", "price": 2.0},
            {"timestamp": pd.NaT, "price": 9.0},
            {"timestamp": "2024-01-01T00:00:00", "price": 1.0},
        ])
        assert [r.price for r in result] == [1.0, 2.0]
