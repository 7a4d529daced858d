"""Backtest-specific data classes."""
from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from stratbench.config.settings import (
    DEFAULT_COMMISSION_RATE,
    DEFAULT_END_DATE,
    DEFAULT_INITIAL_BALANCE,
    DEFAULT_RISK_FREE_RATE,
    DEFAULT_START_DATE,
    DEFAULT_SYMBOL,
)
from stratbench.data.models import Trade


class BacktestConfig(BaseModel):
    """Per-run settings. The date span only feeds the annualized return."""
    initial_balance: float = Field(default=DEFAULT_INITIAL_BALANCE, gt=0)
    commission_rate: float = Field(default=DEFAULT_COMMISSION_RATE, ge=0, lt=1)
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE
    start_date: date = Field(default_factory=lambda: date.fromisoformat(DEFAULT_START_DATE))
    end_date: date = Field(default_factory=lambda: date.fromisoformat(DEFAULT_END_DATE))
    symbol: str = DEFAULT_SYMBOL

    @property
    def days_elapsed(self) -> int:
        return (self.end_date - self.start_date).days


class PerformanceMetrics(BaseModel):
    """Aggregate statistics for a finished backtest.

    ``win_rate``, ``total_return``, ``avg_win``, ``avg_loss`` and
    ``max_drawdown`` are percentages; ``annualized_return`` is a ratio.
    """
    model_config = ConfigDict(frozen=True)

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    total_return: float = 0.0
    annualized_return: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    profit_factor: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    avg_hold_time: float = 0.0  # seconds


class BacktestResult(PerformanceMetrics):
    """Complete backtest output: metrics plus the ledger and curves."""
    strategy: str
    timeframe: str
    initial_balance: float
    final_balance: float
    equity: list[float] = Field(default_factory=list)
    drawdown: list[float] = Field(default_factory=list)  # ratios, not percent
    trades: list[Trade] = Field(default_factory=list)


class StrategyError(BaseModel):
    """Recorded in place of a result when a strategy's run raised."""
    model_config = ConfigDict(frozen=True)

    strategy: str
    timeframe: str
    error: str


class OptimizationTrial(BaseModel):
    model_config = ConfigDict(frozen=True)

    parameters: dict[str, Any]
    sharpe_ratio: float


class OptimizationResult(BaseModel):
    """Best parameter combination found by grid search, plus every trial in grid order."""
    sharpe_ratio: float = float("-inf")
    parameters: Optional[dict[str, Any]] = None
    result: Optional[BacktestResult] = None
    trials: list[OptimizationTrial] = Field(default_factory=list)
