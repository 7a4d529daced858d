"""Grid-search parameter optimization and multi-strategy comparison."""
from __future__ import annotations

import logging
from itertools import product
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from stratbench.backtest.engine import BacktestEngine
from stratbench.backtest.models import (
    BacktestResult,
    OptimizationResult,
    OptimizationTrial,
    StrategyError,
)
from stratbench.backtest.snapshot import sort_records
from stratbench.data.models import PriceRecord
from stratbench.strategies.base import BaseStrategy
from stratbench.strategies.registry import StrategyRegistry

logger = logging.getLogger(__name__)


def parameter_grid(parameter_ranges: Mapping[str, Sequence[Any]]) -> list[dict[str, Any]]:
    """Every combination of the candidate lists, in key order (last key varies fastest)."""
    keys = list(parameter_ranges)
    return [dict(zip(keys, combo)) for combo in product(*(parameter_ranges[k] for k in keys))]


def _progress(disable: bool) -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        disable=disable,
    )


def optimize_parameters(
    engine: BacktestEngine,
    strategy: BaseStrategy,
    records: Iterable[Union[PriceRecord, dict]],
    parameter_ranges: Mapping[str, Sequence[Any]],
    show_progress: bool = False,
) -> OptimizationResult:
    """Exhaustive grid search keeping the combination with the highest Sharpe ratio.

    Every combination is applied with ``strategy.set_parameters`` and backtested
    in full; ties keep the earlier combination. The strategy is left with the
    last combination of the grid applied.
    """
    data = sort_records(records)
    grid = parameter_grid(parameter_ranges)
    logger.info(f"Grid search for {strategy.name}: {len(grid)} parameter combinations")

    best = OptimizationResult()
    trials: list[OptimizationTrial] = []

    with _progress(disable=not show_progress) as progress:
        task = progress.add_task(f"Optimizing {strategy.name}", total=len(grid))

        for params in grid:
            strategy.set_parameters(params)
            result = engine.run(strategy, data)
            trials.append(OptimizationTrial(parameters=params, sharpe_ratio=result.sharpe_ratio))

            if result.sharpe_ratio > best.sharpe_ratio:
                best = OptimizationResult(
                    sharpe_ratio=result.sharpe_ratio,
                    parameters=dict(params),
                    result=result,
                )
                logger.info(f"New best sharpe={result.sharpe_ratio:.4f} with {params}")

            progress.advance(task)

    return best.model_copy(update={"trials": trials})


def compare_strategies(
    engine: BacktestEngine,
    strategies: Iterable[Union[BaseStrategy, str]],
    records: Iterable[Union[PriceRecord, dict]],
    registry: Optional[StrategyRegistry] = None,
) -> dict[str, Union[BacktestResult, StrategyError]]:
    """Backtest each strategy independently, keyed by timeframe.

    Strategies may be passed as timeframe keys, resolved through ``registry``
    before any run starts (unknown keys raise UnknownStrategyError). A strategy
    that fails mid-run is recorded as a StrategyError and the rest continue.
    """
    resolved: list[BaseStrategy] = []
    for item in strategies:
        if isinstance(item, str):
            if registry is None:
                raise ValueError(f"Strategy key '{item}' given without a registry")
            resolved.append(registry.get(item))
        else:
            resolved.append(item)

    data = sort_records(records)
    results: dict[str, Union[BacktestResult, StrategyError]] = {}
    for strategy in resolved:
        try:
            results[strategy.timeframe] = engine.run(strategy, data)
        except Exception as e:
            logger.error(f"Backtest failed for {strategy.name}: {e}")
            results[strategy.timeframe] = StrategyError(
                strategy=strategy.name,
                timeframe=strategy.timeframe,
                error=str(e),
            )
    return results
