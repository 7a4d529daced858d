"""Long-term investing: buy established uptrends, hold until the trend breaks."""
from __future__ import annotations

from typing import Optional

from stratbench.data.models import MarketSnapshot, Position
from stratbench.strategies.base import BaseStrategy, SignalData
from stratbench.strategies.models import EntryAnalysis, StrategyParameters


class LongTermStrategy(BaseStrategy):
    name = "Long Term"
    timeframe = "LONG_TERM"
    risk_level = "low"
    default_parameters = StrategyParameters(
        target_profit=15.0,
        stop_loss=8.0,
        max_hold_time=2_592_000,
        max_position_size=0.2,
        min_volatility=0.0,
    )

    def can_execute(self, signal_data: SignalData, snapshot: MarketSnapshot) -> bool:
        ma = snapshot.moving_averages
        return (
            ma.sma50 > 0
            and snapshot.current_price > ma.sma50 >= ma.sma200
            and snapshot.volatility >= self.parameters.min_volatility
        )

    def analyze_entry(self, signal_data: SignalData, snapshot: MarketSnapshot) -> EntryAnalysis:
        ma = snapshot.moving_averages
        spread = (ma.sma50 - ma.sma200) / ma.sma200 if ma.sma200 else 0.0
        params = self.parameters
        return EntryAnalysis(
            action="BUY",
            entry_price=snapshot.current_price,
            confidence=min(0.5 + spread * 10, 1.0),
            risk_reward=params.target_profit / params.stop_loss if params.stop_loss else 0.0,
            expected_duration=params.max_hold_time,
            reason=f"price above SMA50 {ma.sma50:.2f} >= SMA200 {ma.sma200:.2f}",
        )

    def _extra_exit_reason(self, position: Position, snapshot: MarketSnapshot) -> Optional[str]:
        if snapshot.trend.direction == "down" and snapshot.current_price < snapshot.moving_averages.sma50:
            return "trend reversal"
        return None
