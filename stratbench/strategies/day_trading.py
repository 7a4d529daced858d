"""Day trading: follow the intraday trend, exit on RSI extremes."""
from __future__ import annotations

from typing import Optional

from stratbench.data.models import MarketSnapshot, Position
from stratbench.strategies.base import BaseStrategy, SignalData
from stratbench.strategies.models import EntryAnalysis, StrategyParameters

MAX_SPREAD = 0.2
RSI_OVERBOUGHT = 70
RSI_OVERSOLD = 30


class DayTradingStrategy(BaseStrategy):
    name = "Day Trading"
    timeframe = "DAY_TRADING"
    risk_level = "medium-high"
    min_score = 45
    default_parameters = StrategyParameters(
        target_profit=2.0,
        stop_loss=1.0,
        max_hold_time=86_400,
        max_position_size=0.1,
        min_volatility=0.3,
    )

    def can_execute(self, signal_data: SignalData, snapshot: MarketSnapshot) -> bool:
        return (
            self._score_allows(signal_data)
            and snapshot.volatility >= self.parameters.min_volatility
            and snapshot.spread <= MAX_SPREAD
            and snapshot.trend.direction != "neutral"
        )

    def analyze_entry(self, signal_data: SignalData, snapshot: MarketSnapshot) -> EntryAnalysis:
        trend = snapshot.trend
        if trend.direction == "up" and snapshot.rsi < RSI_OVERBOUGHT:
            action = "BUY"
        elif trend.direction == "down" and snapshot.rsi > RSI_OVERSOLD:
            action = "SELL"
        else:
            action = "HOLD"

        params = self.parameters
        return EntryAnalysis(
            action=action,
            entry_price=snapshot.current_price,
            confidence=min(0.4 + trend.strength, 1.0),
            risk_reward=params.target_profit / params.stop_loss if params.stop_loss else 0.0,
            expected_duration=params.max_hold_time / 2,
            reason=f"trend {trend.direction} (strength {trend.strength:.2f}), RSI {snapshot.rsi:.1f}",
        )

    def _extra_exit_reason(self, position: Position, snapshot: MarketSnapshot) -> Optional[str]:
        if position.direction == "BUY" and snapshot.rsi > RSI_OVERBOUGHT:
            return "technical exit"
        if position.direction == "SELL" and snapshot.rsi < RSI_OVERSOLD:
            return "technical exit"
        return None
