"""Scalping: short holds, tight targets, only in liquid and moving markets."""
from __future__ import annotations

from typing import Optional

from stratbench.data.models import MarketSnapshot, Position
from stratbench.strategies.base import BaseStrategy, SignalData
from stratbench.strategies.models import EntryAnalysis, StrategyParameters

MAX_SPREAD = 0.1
EXIT_SPREAD = 0.2


class ScalpingStrategy(BaseStrategy):
    name = "Scalping"
    timeframe = "SCALPING"
    risk_level = "high"
    min_score = 65
    default_parameters = StrategyParameters(
        target_profit=0.5,
        stop_loss=0.3,
        max_hold_time=300,
        max_position_size=0.05,
        min_volatility=0.5,
    )

    def can_execute(self, signal_data: SignalData, snapshot: MarketSnapshot) -> bool:
        return (
            self._score_allows(signal_data)
            and snapshot.volatility >= self.parameters.min_volatility
            and snapshot.spread <= MAX_SPREAD
        )

    def analyze_entry(self, signal_data: SignalData, snapshot: MarketSnapshot) -> EntryAnalysis:
        histogram = snapshot.macd.histogram
        action = "BUY" if histogram >= 0 else "SELL"
        # Momentum strength relative to price, capped at 1
        strength = abs(histogram) / snapshot.current_price * 100 if snapshot.current_price else 0.0
        confidence = min(0.5 + strength, 1.0)

        params = self.parameters
        return EntryAnalysis(
            action=action,
            entry_price=snapshot.current_price,
            confidence=confidence,
            risk_reward=params.target_profit / params.stop_loss if params.stop_loss else 0.0,
            expected_duration=max(params.max_hold_time * (0.5 if snapshot.volatility > 15 else 1.0), 60),
            reason=f"MACD histogram {histogram:+.4f}",
        )

    def _extra_exit_reason(self, position: Position, snapshot: MarketSnapshot) -> Optional[str]:
        if snapshot.spread > EXIT_SPREAD:
            return "spread widening"
        return None
