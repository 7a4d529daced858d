"""Tests for the command-line entry point."""
import json
from unittest.mock import patch

import pytest

from stratbench.backtest import optimizer
from stratbench.backtester import main, parse_args


def _write_prices(tmp_path, n=60):
    lines = ["timestamp,price,volume"]
    for i in range(n):
        price = 100 + (i % 10) - (i // 20)
        lines.append(f"2024-01-01T{i // 60:02d}:{i % 60:02d}:00,{price},100")
    path = tmp_path / "prices.csv"
    path.write_text("\n".join(lines) + "\n")
    return str(path)


class TestParseArgs:
    def test_defaults(self):
        args = parse_args(["--data", "prices.csv"])
        assert args.strategy == "DAY_TRADING"
        assert args.compare is False
        assert args.optimize is False
        assert args.export is None

    def test_candidate_lists(self):
        args = parse_args(["-d", "p.csv", "--optimize", "--target-profit", "1,2.5", "--stop-loss", "0.5"])
        assert args.target_profit == [1.0, 2.5]
        assert args.stop_loss == [0.5]
        assert args.max_hold_time is None

    def test_bad_candidate_list(self):
        with pytest.raises(SystemExit):
            parse_args(["-d", "p.csv", "--target-profit", "1,abc"])

    def test_data_required(self):
        with pytest.raises(SystemExit):
            parse_args([])

    def test_compare_rejects_export(self):
        with pytest.raises(SystemExit):
            parse_args(["-d", "p.csv", "--compare", "--export", "out.json"])

    def test_optimize_needs_candidates(self):
        with pytest.raises(SystemExit):
            parse_args(["-d", "p.csv", "--optimize"])


class TestMain:
    def test_single_run(self, tmp_path):
        assert main(["--data", _write_prices(tmp_path), "--strategy", "REJECT"]) == 0

    def test_compare(self, tmp_path):
        assert main(["--data", _write_prices(tmp_path), "--compare"]) == 0

    def test_optimize(self, tmp_path):
        argv = [
            "--data", _write_prices(tmp_path), "--strategy", "DAY_TRADING", "--optimize",
            "--target-profit", "1,2", "--stop-loss", "0.5,1",
        ]
        with patch("stratbench.backtester.optimize_parameters", wraps=optimizer.optimize_parameters) as spy:
            assert main(argv) == 0
        ranges = spy.call_args.args[3]
        assert ranges == {"target_profit": [1.0, 2.0], "stop_loss": [0.5, 1.0]}

    def test_unknown_strategy(self, tmp_path):
        assert main(["--data", _write_prices(tmp_path), "--strategy", "NOPE"]) == 1

    def test_missing_file(self, tmp_path):
        assert main(["--data", str(tmp_path / "missing.csv")]) == 1

    def test_export(self, tmp_path):
        out = tmp_path / "result.json"
        assert main(["--data", _write_prices(tmp_path), "-s", "REJECT", "--export", str(out)]) == 0
        data = json.loads(out.read_text())
        assert data["timeframe"] == "REJECT"
        assert data["total_trades"] == 0
        assert len(data["equity"]) == 61

    def test_compare_with_export_writes_nothing(self, tmp_path):
        out = tmp_path / "compare.json"
        with pytest.raises(SystemExit):
            main(["--data", _write_prices(tmp_path), "--compare", "--export", str(out)])
        assert not out.exists()
