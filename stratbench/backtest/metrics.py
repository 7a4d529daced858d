"""Performance metrics for a finished backtest."""
from __future__ import annotations

import logging

import numpy as np

from stratbench.backtest.models import PerformanceMetrics
from stratbench.data.models import Trade

logger = logging.getLogger(__name__)


def compute_metrics(
    trades: list[Trade],
    initial_balance: float,
    final_balance: float,
    max_drawdown: float,
    days_elapsed: float,
    risk_free_rate: float = 0.0,
) -> PerformanceMetrics:
    """Compute aggregate statistics from the trade ledger.

    ``max_drawdown`` is the tracker's ratio and is reported as a percentage.
    Ratios with a zero denominator are reported as 0. With no trades every
    statistic is 0.
    """
    if not trades:
        return PerformanceMetrics()

    total_trades = len(trades)
    returns = np.array([t.profit_loss for t in trades])
    pnls = np.array([t.pnl for t in trades])
    winners = returns > 0
    losers = returns < 0

    win_rate = winners.sum() / total_trades * 100
    total_return = (final_balance - initial_balance) / initial_balance * 100

    # Population std over per-trade returns
    std = float(np.std(returns))
    sharpe = (float(np.mean(returns)) - risk_free_rate) / std if std != 0 else 0.0

    total_wins = float(pnls[winners].sum())
    total_losses = abs(float(pnls[losers].sum()))
    profit_factor = total_wins / total_losses if total_losses != 0 else 0.0

    return PerformanceMetrics(
        total_trades=total_trades,
        winning_trades=int(winners.sum()),
        losing_trades=int(losers.sum()),
        win_rate=float(win_rate),
        total_return=total_return,
        annualized_return=annualize(total_return, days_elapsed),
        sharpe_ratio=sharpe,
        max_drawdown=max_drawdown * 100,
        profit_factor=profit_factor,
        avg_win=float(np.mean(returns[winners])) if winners.any() else 0.0,
        avg_loss=float(np.mean(returns[losers])) if losers.any() else 0.0,
        avg_hold_time=float(np.mean([t.hold_time for t in trades])),
    )


def annualize(total_return_pct: float, days_elapsed: float) -> float:
    """Compound a total percentage return to a yearly ratio.

    Returns 0 for a non-positive span and -1 when the account was wiped out
    (growth factor <= 0), where the power is undefined.
    """
    if days_elapsed <= 0:
        logger.warning(f"Backtest span of {days_elapsed} days; annualized return reported as 0")
        return 0.0
    growth = 1 + total_return_pct / 100
    if growth <= 0:
        return -1.0
    try:
        return growth ** (365 / days_elapsed) - 1
    except OverflowError:
        logger.warning(f"Annualized return overflowed for a {days_elapsed}-day span")
        return float("inf")
