"""Strategy contract consumed by the backtesting engine."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Union

import numpy as np

from stratbench.data.models import MarketSnapshot, Position, PriceRecord, Trade
from stratbench.strategies.models import (
    AccountData,
    EntryAnalysis,
    ExitAnalysis,
    PositionSize,
    StrategyParameters,
    StrategyPerformance,
)

logger = logging.getLogger(__name__)

SignalData = Union[PriceRecord, Mapping[str, Any]]


class BaseStrategy(ABC):
    """Base class for all trading strategies.

    Subclasses decide admissibility and entry direction; exit checks, sizing,
    performance summaries and parameter updates are shared.
    """

    name: str = "Base"
    timeframe: str = "BASE"
    risk_level: str = "medium"
    min_score: Optional[float] = None
    default_parameters = StrategyParameters()

    def __init__(self, parameters: Optional[StrategyParameters] = None) -> None:
        self.parameters: StrategyParameters = (parameters or self.default_parameters).model_copy()

    # ── Contract ────────────────────────────────────────────────────

    @abstractmethod
    def can_execute(self, signal_data: SignalData, snapshot: MarketSnapshot) -> bool:
        """Whether the strategy may open a position at this step. Must not mutate state."""

    @abstractmethod
    def analyze_entry(self, signal_data: SignalData, snapshot: MarketSnapshot) -> EntryAnalysis:
        """Decide direction, entry price and confidence for a new position."""

    def analyze_exit(self, position: Position, snapshot: MarketSnapshot) -> ExitAnalysis:
        """Check profit target, stop loss, hold time and any strategy-specific exit."""
        price = snapshot.current_price
        profit_loss = _price_move_pct(position, price)
        hold_time = (snapshot.timestamp - position.entry_time).total_seconds()
        params = self.parameters

        conditions = [
            ("profit target", profit_loss >= params.target_profit),
            ("stop loss", profit_loss <= -params.stop_loss),
            ("time limit", hold_time >= params.max_hold_time),
        ]
        extra = self._extra_exit_reason(position, snapshot)
        if extra:
            conditions.append((extra, True))

        reason = next((label for label, hit in conditions if hit), "")
        return ExitAnalysis(
            should_exit=bool(reason),
            exit_price=price,
            exit_reason=reason,
            profit_loss=profit_loss,
            hold_time=hold_time,
        )

    def calculate_position_size(
        self,
        entry: EntryAnalysis,
        account: AccountData,
        snapshot: MarketSnapshot,
    ) -> PositionSize:
        """Scale the maximum position size by entry confidence."""
        if entry.action == "HOLD" or entry.entry_price <= 0 or account.balance <= 0:
            return PositionSize()
        max_size = self.parameters.max_position_size
        size = min(max_size * entry.confidence, max_size)
        if size <= 0:
            return PositionSize()
        return PositionSize(size=size, quantity=account.balance * size / entry.entry_price)

    def calculate_performance(self, trades: list[Trade]) -> StrategyPerformance:
        """Summarize trades from this strategy's perspective."""
        if not trades:
            return StrategyPerformance(strategy=self.name, timeframe=self.timeframe)

        returns = np.array([t.profit_loss for t in trades])
        wins = returns[returns > 0]
        losses = returns[returns < 0]
        avg_win = float(np.mean(wins)) if len(wins) else 0.0
        avg_loss = float(np.mean(losses)) if len(losses) else 0.0

        return StrategyPerformance(
            strategy=self.name,
            timeframe=self.timeframe,
            total_trades=len(trades),
            win_rate=len(wins) / len(trades) * 100,
            avg_win=avg_win,
            avg_loss=avg_loss,
            profit_factor=abs(avg_win / avg_loss) if avg_loss != 0 else 0.0,
            avg_hold_time=float(np.mean([t.hold_time for t in trades])),
        )

    def set_parameters(self, updates: Mapping[str, Any]) -> StrategyParameters:
        """Merge a partial update and return the new effective parameters.

        Raises ValueError for unknown keys or invalid values; the current
        parameters are left untouched in that case.
        """
        unknown = set(updates) - set(StrategyParameters.model_fields)
        if unknown:
            raise ValueError(f"Unknown parameters for {self.name}: {sorted(unknown)}")
        merged = {**self.parameters.model_dump(), **dict(updates)}
        self.parameters = StrategyParameters.model_validate(merged)
        logger.debug(f"[{self.timeframe}] parameters updated: {dict(updates)}")
        return self.parameters

    def describe(self) -> str:
        return f"{self.name} strategy - {self.timeframe} timeframe"

    # ── Helpers ─────────────────────────────────────────────────────

    def _extra_exit_reason(self, position: Position, snapshot: MarketSnapshot) -> Optional[str]:
        """Strategy-specific exit trigger. Return a reason to exit, or None."""
        return None

    def _score_allows(self, signal_data: SignalData) -> bool:
        """Apply the optional ``final_score`` gate carried by the signal data."""
        if self.min_score is None:
            return True
        score = _signal_value(signal_data, "final_score")
        return score is None or score >= self.min_score


def _signal_value(signal_data: SignalData, key: str) -> Optional[Any]:
    if isinstance(signal_data, Mapping):
        return signal_data.get(key)
    return getattr(signal_data, key, None)


def _price_move_pct(position: Position, price: float) -> float:
    if position.entry_price == 0:
        return 0.0
    move = (price - position.entry_price) / position.entry_price * 100
    return move if position.direction == "BUY" else -move
