"""Export backtest results to JSON or CSV."""
from __future__ import annotations

import csv
import json
import os
from datetime import date, datetime
from typing import Any

from stratbench.backtest.models import BacktestResult


def _json_serial(obj: Any) -> Any:
    """JSON serializer for objects not serializable by default."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"Type {type(obj)} not serializable")


def export_json(result: BacktestResult, path: str) -> None:
    """Export BacktestResult to a JSON file."""
    data = result.model_dump(mode="json")
    with open(path, "w") as f:
        json.dump(data, f, indent=2, default=_json_serial)


def export_csv(result: BacktestResult, path: str) -> None:
    """Export BacktestResult to a multi-section CSV file."""
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)

        # Section 1: Summary
        writer.writerow(["# Summary"])
        writer.writerow(["strategy", "timeframe", "initial_balance", "final_balance", "total_return"])
        writer.writerow([
            result.strategy,
            result.timeframe,
            result.initial_balance,
            result.final_balance,
            result.total_return,
        ])
        writer.writerow([])

        # Section 2: Metrics
        writer.writerow(["# Metrics"])
        metrics_headers = [
            "total_trades", "winning_trades", "losing_trades", "win_rate",
            "total_return", "annualized_return", "sharpe_ratio", "max_drawdown",
            "profit_factor", "avg_win", "avg_loss", "avg_hold_time",
        ]
        writer.writerow(metrics_headers)
        writer.writerow([getattr(result, h) for h in metrics_headers])
        writer.writerow([])

        # Section 3: Trades
        writer.writerow(["# Trades"])
        trade_headers = [
            "symbol", "direction", "entry_time", "exit_time", "entry_price", "exit_price",
            "quantity", "hold_time", "profit_loss", "pnl", "commission", "exit_reason", "confidence",
        ]
        writer.writerow(trade_headers)
        for trade in result.trades:
            writer.writerow([
                trade.symbol, trade.direction,
                trade.entry_time.isoformat(), trade.exit_time.isoformat(),
                trade.entry_price, trade.exit_price, trade.quantity, trade.hold_time,
                trade.profit_loss, trade.pnl, trade.commission, trade.exit_reason,
                trade.confidence,
            ])
        writer.writerow([])

        # Section 4: Equity curve
        writer.writerow(["# Equity"])
        writer.writerow(["step", "equity", "drawdown"])
        for step, (equity, drawdown) in enumerate(zip(result.equity, result.drawdown)):
            writer.writerow([step, equity, drawdown])


def export_results(result: BacktestResult, path: str) -> None:
    """Export results to JSON or CSV based on file extension.

    Raises ValueError for unsupported extensions.
    """
    _, ext = os.path.splitext(path)
    ext = ext.lower()
    if ext == ".json":
        export_json(result, path)
    elif ext == ".csv":
        export_csv(result, path)
    else:
        raise ValueError(f"Unsupported export format: '{ext}'. Use .json or .csv")
