"""Strategy registry keyed by timeframe."""
from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping

from stratbench.data.models import MarketSnapshot
from stratbench.strategies.base import BaseStrategy, SignalData
from stratbench.strategies.day_trading import DayTradingStrategy
from stratbench.strategies.long_term import LongTermStrategy
from stratbench.strategies.models import StrategyParameters
from stratbench.strategies.reject import RejectStrategy
from stratbench.strategies.scalping import ScalpingStrategy
from stratbench.strategies.swing_trading import SwingTradingStrategy

logger = logging.getLogger(__name__)


class UnknownStrategyError(ValueError):
    """Raised when a timeframe key has no registered strategy."""

    def __init__(self, timeframe: str, known: list[str]) -> None:
        self.timeframe = timeframe
        super().__init__(f"Unknown strategy for timeframe: {timeframe}. Choose from: {known}")


class StrategyRegistry:
    """Explicit mapping of timeframe key -> strategy instance.

    Built once by the caller and passed to whatever needs lookups. Lookup is by
    exact key; unknown keys raise UnknownStrategyError.
    """

    def __init__(self, strategies: list[BaseStrategy] | None = None) -> None:
        self._strategies: dict[str, BaseStrategy] = {}
        for strategy in strategies or []:
            self.register(strategy)

    def register(self, strategy: BaseStrategy, key: str | None = None) -> None:
        key = key or strategy.timeframe
        if key in self._strategies:
            logger.warning(f"Replacing registered strategy for {key}")
        self._strategies[key] = strategy

    def get(self, key: str) -> BaseStrategy:
        try:
            return self._strategies[key]
        except KeyError:
            raise UnknownStrategyError(key, self.keys()) from None

    def keys(self) -> list[str]:
        return list(self._strategies)

    def __contains__(self, key: object) -> bool:
        return key in self._strategies

    def __iter__(self) -> Iterator[BaseStrategy]:
        return iter(self._strategies.values())

    def __len__(self) -> int:
        return len(self._strategies)

    def update(self, key: str, parameters: Mapping[str, Any]) -> StrategyParameters:
        """Apply a partial parameter update to a registered strategy."""
        return self.get(key).set_parameters(parameters)

    def available_strategies(
        self, signal_data: SignalData, snapshot: MarketSnapshot,
    ) -> list[tuple[str, BaseStrategy, float]]:
        """Strategies that can execute now, highest entry confidence first."""
        available = []
        for key, strategy in self._strategies.items():
            if not strategy.can_execute(signal_data, snapshot):
                continue
            confidence = strategy.analyze_entry(signal_data, snapshot).confidence
            available.append((key, strategy, confidence))
        return sorted(available, key=lambda item: item[2], reverse=True)

    def statistics(self) -> dict[str, dict[str, Any]]:
        """Name, risk level, current parameters and description per strategy."""
        return {
            key: {
                "name": strategy.name,
                "risk_level": strategy.risk_level,
                **strategy.parameters.model_dump(),
                "description": strategy.describe(),
            }
            for key, strategy in self._strategies.items()
        }


def default_registry() -> StrategyRegistry:
    """A fresh registry with one instance of every built-in strategy."""
    return StrategyRegistry([
        ScalpingStrategy(),
        DayTradingStrategy(),
        SwingTradingStrategy(),
        LongTermStrategy(),
        RejectStrategy(),
    ])
