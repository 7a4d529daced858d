"""Data classes exchanged between strategies and the backtester."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from stratbench.data.models import Position

EntryAction = Literal["BUY", "SELL", "HOLD"]


class EntryAnalysis(BaseModel):
    """A strategy's view on opening a position at the current step."""
    action: EntryAction
    entry_price: float
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    risk_reward: float = 0.0
    expected_duration: float = 0.0  # seconds
    reason: str = ""


class ExitAnalysis(BaseModel):
    """A strategy's view on closing an open position."""
    should_exit: bool
    exit_price: float
    exit_reason: str = ""
    profit_loss: float = 0.0  # raw price move in percent, direction-aware
    hold_time: float = 0.0  # seconds


class PositionSize(BaseModel):
    size: float = 0.0  # fraction of balance; <= 0 means do not open
    quantity: float = 0.0


class AccountData(BaseModel):
    balance: float
    risk_tolerance: float = 0.5
    current_positions: list[Position] = Field(default_factory=list)


class StrategyParameters(BaseModel):
    """Tunable strategy parameters. Percentages are in percent units."""
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    target_profit: float = Field(default=2.0, ge=0)
    stop_loss: float = Field(default=1.0, ge=0)
    max_hold_time: float = Field(default=86_400, ge=0)  # seconds
    max_position_size: float = Field(default=0.1, ge=0, le=1)
    min_volatility: float = Field(default=0.0, ge=0)


class StrategyPerformance(BaseModel):
    """Per-strategy trade statistics (independent of the backtest metrics)."""
    strategy: str
    timeframe: str
    total_trades: int = 0
    win_rate: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    profit_factor: float = 0.0
    avg_hold_time: float = 0.0
