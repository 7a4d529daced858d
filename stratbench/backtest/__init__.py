"""Backtesting engine for trading strategies."""
from stratbench.backtest.engine import BacktestEngine
from stratbench.backtest.export import export_results
from stratbench.backtest.metrics import compute_metrics
from stratbench.backtest.models import (
    BacktestConfig,
    BacktestResult,
    OptimizationResult,
    PerformanceMetrics,
    StrategyError,
)
from stratbench.backtest.optimizer import compare_strategies, optimize_parameters
from stratbench.backtest.portfolio_tracker import PortfolioTracker
from stratbench.backtest.snapshot import MarketSnapshotBuilder

__all__ = [
    "BacktestConfig",
    "BacktestEngine",
    "BacktestResult",
    "MarketSnapshotBuilder",
    "OptimizationResult",
    "PerformanceMetrics",
    "PortfolioTracker",
    "StrategyError",
    "compare_strategies",
    "compute_metrics",
    "export_results",
    "optimize_parameters",
]
