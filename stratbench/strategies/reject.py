"""Reject: never trades."""
from __future__ import annotations

from stratbench.data.models import MarketSnapshot
from stratbench.strategies.base import BaseStrategy, SignalData
from stratbench.strategies.models import EntryAnalysis, StrategyParameters


class RejectStrategy(BaseStrategy):
    name = "Reject"
    timeframe = "REJECT"
    risk_level = "none"
    default_parameters = StrategyParameters(
        target_profit=0.0,
        stop_loss=0.0,
        max_hold_time=0,
        max_position_size=0.0,
    )

    def can_execute(self, signal_data: SignalData, snapshot: MarketSnapshot) -> bool:
        return False

    def analyze_entry(self, signal_data: SignalData, snapshot: MarketSnapshot) -> EntryAnalysis:
        return EntryAnalysis(
            action="HOLD",
            entry_price=snapshot.current_price,
            confidence=0.0,
            reason="signal too weak or risk too high",
        )
