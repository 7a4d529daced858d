"""Tests for backtest result export (JSON & CSV)."""
from __future__ import annotations

import csv
import json
from datetime import datetime

import pytest

from stratbench.backtest.export import export_csv, export_json, export_results
from stratbench.backtest.models import BacktestResult
from stratbench.data.models import Trade


def _make_result() -> BacktestResult:
    """Build a minimal BacktestResult for testing."""
    return BacktestResult(
        strategy="Day Trading",
        timeframe="DAY_TRADING",
        initial_balance=10_000.0,
        final_balance=10_150.0,
        total_trades=2,
        winning_trades=1,
        losing_trades=1,
        win_rate=50.0,
        total_return=1.5,
        annualized_return=0.015,
        sharpe_ratio=0.8,
        max_drawdown=2.5,
        profit_factor=3.0,
        avg_win=3.0,
        avg_loss=-1.0,
        avg_hold_time=5400.0,
        equity=[10_000.0, 10_100.0, 9_850.0, 10_150.0],
        drawdown=[0.0, 0.0, 0.025, 0.0],
        trades=[
            Trade(
                symbol="BTC", direction="BUY",
                entry_price=100.0, exit_price=103.0, quantity=10.0,
                entry_time=datetime(2025, 1, 3, 9, 0), exit_time=datetime(2025, 1, 3, 10, 0),
                hold_time=3600.0, profit_loss=3.0, pnl=30.0, commission=0.0,
                exit_reason="profit target", confidence=0.7,
            ),
            Trade(
                symbol="BTC", direction="SELL",
                entry_price=103.0, exit_price=104.0, quantity=10.0,
                entry_time=datetime(2025, 1, 3, 10, 0), exit_time=datetime(2025, 1, 3, 12, 0),
                hold_time=7200.0, profit_loss=-1.0, pnl=-10.0, commission=0.0,
                exit_reason="stop loss", confidence=0.6,
            ),
        ],
    )


class TestExportJson:
    def test_export_json(self, tmp_path):
        result = _make_result()
        path = str(tmp_path / "results.json")
        export_json(result, path)

        with open(path) as f:
            data = json.load(f)

        assert data["strategy"] == "Day Trading"
        assert data["timeframe"] == "DAY_TRADING"
        assert data["initial_balance"] == 10_000.0
        assert data["final_balance"] == 10_150.0
        assert data["sharpe_ratio"] == 0.8
        assert len(data["trades"]) == 2
        assert len(data["equity"]) == 4

    def test_export_json_roundtrip(self, tmp_path):
        """Timestamps serialize as ISO strings and fields survive roundtrip."""
        result = _make_result()
        path = str(tmp_path / "roundtrip.json")
        export_json(result, path)

        with open(path) as f:
            data = json.load(f)

        assert data["trades"][0]["entry_time"] == "2025-01-03T09:00:00"
        assert data["trades"][1]["direction"] == "SELL"

        restored = BacktestResult(**data)
        assert restored == result


class TestExportCsv:
    def test_export_csv_sections(self, tmp_path):
        path = str(tmp_path / "results.csv")
        export_csv(_make_result(), path)

        with open(path) as f:
            content = f.read()

        assert "# Summary" in content
        assert "# Metrics" in content
        assert "# Trades" in content
        assert "# Equity" in content

    def test_export_csv_summary_headers(self, tmp_path):
        path = str(tmp_path / "results.csv")
        export_csv(_make_result(), path)

        with open(path) as f:
            lines = f.readlines()

        # Line 0: "# Summary", Line 1: headers
        header_line = lines[1].strip()
        assert "strategy" in header_line
        assert "initial_balance" in header_line
        assert "final_balance" in header_line

    def test_export_csv_trades_section(self, tmp_path):
        path = str(tmp_path / "results.csv")
        export_csv(_make_result(), path)

        with open(path, newline="") as f:
            rows = list(csv.reader(f))

        start = rows.index(["# Trades"])
        headers = rows[start + 1]
        first = dict(zip(headers, rows[start + 2]))
        second = dict(zip(headers, rows[start + 3]))
        assert first["direction"] == "BUY"
        assert first["exit_reason"] == "profit target"
        assert float(first["pnl"]) == 30.0
        assert second["direction"] == "SELL"

    def test_export_csv_equity_section(self, tmp_path):
        path = str(tmp_path / "results.csv")
        export_csv(_make_result(), path)

        with open(path, newline="") as f:
            rows = list(csv.reader(f))

        start = rows.index(["# Equity"])
        assert rows[start + 1] == ["step", "equity", "drawdown"]
        curve = rows[start + 2:]
        assert len(curve) == 4
        assert curve[2] == ["2", "9850.0", "0.025"]

    def test_export_csv_no_trades(self, tmp_path):
        result = BacktestResult(
            strategy="Reject", timeframe="REJECT",
            initial_balance=10_000.0, final_balance=10_000.0,
            equity=[10_000.0], drawdown=[0.0],
        )
        path = str(tmp_path / "empty.csv")
        export_csv(result, path)

        with open(path, newline="") as f:
            rows = list(csv.reader(f))

        start = rows.index(["# Trades"])
        assert rows[start + 2] == []


class TestExportResults:
    def test_dispatch_json(self, tmp_path):
        path = str(tmp_path / "out.json")
        export_results(_make_result(), path)
        with open(path) as f:
            assert json.load(f)["strategy"] == "Day Trading"

    def test_dispatch_csv_case_insensitive(self, tmp_path):
        path = str(tmp_path / "out.CSV")
        export_results(_make_result(), path)
        with open(path) as f:
            assert f.readline().strip() == "# Summary"

    def test_unsupported_extension(self, tmp_path):
        with pytest.raises(ValueError, match="Unsupported export format"):
            export_results(_make_result(), str(tmp_path / "out.xlsx"))
