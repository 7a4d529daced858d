"""Swing trading: fade moves to the Bollinger bands, respect stop/target levels."""
from __future__ import annotations

from typing import Optional

from stratbench.data.models import MarketSnapshot, Position
from stratbench.strategies.base import BaseStrategy, SignalData
from stratbench.strategies.models import EntryAnalysis, StrategyParameters


class SwingTradingStrategy(BaseStrategy):
    name = "Swing Trading"
    timeframe = "SWING_TRADING"
    risk_level = "medium"
    min_score = 40
    default_parameters = StrategyParameters(
        target_profit=5.0,
        stop_loss=2.5,
        max_hold_time=604_800,
        max_position_size=0.15,
        min_volatility=0.2,
    )

    def can_execute(self, signal_data: SignalData, snapshot: MarketSnapshot) -> bool:
        bands = snapshot.bollinger
        if bands.current is None:
            return False
        return (
            self._score_allows(signal_data)
            and snapshot.volatility >= self.parameters.min_volatility
            and (bands.current <= bands.lower or bands.current >= bands.upper)
        )

    def analyze_entry(self, signal_data: SignalData, snapshot: MarketSnapshot) -> EntryAnalysis:
        bands = snapshot.bollinger
        width = bands.upper - bands.lower
        if bands.current is None or width <= 0:
            return EntryAnalysis(action="HOLD", entry_price=snapshot.current_price)

        action = "BUY" if bands.current <= bands.middle else "SELL"
        # Distance outside the band, as a fraction of band width
        overshoot = max(bands.lower - bands.current, bands.current - bands.upper, 0.0) / width
        params = self.parameters
        return EntryAnalysis(
            action=action,
            entry_price=snapshot.current_price,
            confidence=min(0.5 + overshoot, 1.0),
            risk_reward=params.target_profit / params.stop_loss if params.stop_loss else 0.0,
            expected_duration=params.max_hold_time / 2,
            reason=f"price {bands.current:.2f} outside bands [{bands.lower:.2f}, {bands.upper:.2f}]",
        )

    def _extra_exit_reason(self, position: Position, snapshot: MarketSnapshot) -> Optional[str]:
        price = snapshot.current_price
        if position.stop_loss is not None and position.take_profit is not None:
            if position.direction == "BUY":
                if price < position.stop_loss:
                    return "stop level"
                if price > position.take_profit:
                    return "target level"
            else:
                if price > position.stop_loss:
                    return "stop level"
                if price < position.take_profit:
                    return "target level"
        return None
