"""Trading strategies for the backtester."""
from stratbench.strategies.base import BaseStrategy
from stratbench.strategies.day_trading import DayTradingStrategy
from stratbench.strategies.long_term import LongTermStrategy
from stratbench.strategies.models import (
    AccountData,
    EntryAnalysis,
    ExitAnalysis,
    PositionSize,
    StrategyParameters,
    StrategyPerformance,
)
from stratbench.strategies.registry import StrategyRegistry, UnknownStrategyError, default_registry
from stratbench.strategies.reject import RejectStrategy
from stratbench.strategies.scalping import ScalpingStrategy
from stratbench.strategies.swing_trading import SwingTradingStrategy

__all__ = [
    "AccountData",
    "BaseStrategy",
    "DayTradingStrategy",
    "EntryAnalysis",
    "ExitAnalysis",
    "LongTermStrategy",
    "PositionSize",
    "RejectStrategy",
    "ScalpingStrategy",
    "StrategyParameters",
    "StrategyPerformance",
    "StrategyRegistry",
    "SwingTradingStrategy",
    "UnknownStrategyError",
    "default_registry",
]
