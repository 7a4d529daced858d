"""Core backtest loop engine."""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from stratbench.backtest.metrics import compute_metrics
from stratbench.backtest.models import BacktestConfig, BacktestResult
from stratbench.backtest.portfolio_tracker import PortfolioTracker
from stratbench.backtest.snapshot import MarketSnapshotBuilder, sort_records
from stratbench.data.models import MarketSnapshot, PriceRecord
from stratbench.strategies.base import BaseStrategy
from stratbench.strategies.models import AccountData, EntryAnalysis

logger = logging.getLogger(__name__)

END_OF_BACKTEST = "backtest end"
RISK_TOLERANCE = 0.5


class BacktestEngine:
    """Replay a price series through a strategy and track the resulting portfolio.

    Each ``run`` builds its own PortfolioTracker, so one engine can be reused for
    sequential runs (optimizer, strategy comparison).
    """

    def __init__(self, config: Optional[BacktestConfig] = None) -> None:
        self.config = config or BacktestConfig()

    def run(
        self,
        strategy: BaseStrategy,
        records: Iterable[Union[PriceRecord, dict]],
    ) -> BacktestResult:
        """Execute the backtest loop. Exceptions raised by the strategy propagate."""
        data = sort_records(records)
        cfg = self.config
        tracker = PortfolioTracker(cfg.initial_balance, commission_rate=cfg.commission_rate)
        builder = MarketSnapshotBuilder(data, symbol=cfg.symbol)

        logger.info(f"Backtesting {strategy.name} over {len(data)} price points")

        for i, record in enumerate(data):
            snapshot = builder.build(i)

            self._manage_positions(tracker, strategy, snapshot)

            if strategy.can_execute(record, snapshot):
                entry = strategy.analyze_entry(record, snapshot)
                self._execute_entry(tracker, strategy, entry, snapshot)

            tracker.mark_to_market(snapshot)

        if data:
            final = data[-1]
            tracker.close_all(final.price, final.timestamp, END_OF_BACKTEST)

        result = self._build_result(strategy, tracker)
        logger.info(
            f"{strategy.name}: {result.total_trades} trades, "
            f"return {result.total_return:+.2f}%, sharpe {result.sharpe_ratio:.2f}"
        )
        return result

    def _manage_positions(
        self,
        tracker: PortfolioTracker,
        strategy: BaseStrategy,
        snapshot: MarketSnapshot,
    ) -> None:
        """Ask the strategy about every open position and close the flagged ones."""
        exits = []
        for index, position in enumerate(tracker.positions):
            analysis = strategy.analyze_exit(position, snapshot)
            if analysis.should_exit:
                exits.append((index, analysis))
        if exits:
            tracker.close_positions(exits, snapshot.timestamp)

    def _execute_entry(
        self,
        tracker: PortfolioTracker,
        strategy: BaseStrategy,
        entry: EntryAnalysis,
        snapshot: MarketSnapshot,
    ) -> None:
        if entry.action == "HOLD":
            return

        account = AccountData(
            balance=tracker.balance,
            risk_tolerance=RISK_TOLERANCE,
            current_positions=list(tracker.positions),
        )
        sizing = strategy.calculate_position_size(entry, account, snapshot)
        if sizing.size <= 0:
            return

        tracker.open_position(
            symbol=snapshot.symbol,
            direction=entry.action,
            entry_price=entry.entry_price,
            quantity=sizing.quantity,
            size=sizing.size,
            entry_time=snapshot.timestamp,
            confidence=entry.confidence,
            volatility=snapshot.volatility,
        )

    def _build_result(self, strategy: BaseStrategy, tracker: PortfolioTracker) -> BacktestResult:
        metrics = compute_metrics(
            tracker.trades,
            initial_balance=tracker.initial_balance,
            final_balance=tracker.balance,
            max_drawdown=tracker.max_drawdown,
            days_elapsed=self.config.days_elapsed,
            risk_free_rate=self.config.risk_free_rate,
        )
        return BacktestResult(
            **metrics.model_dump(),
            strategy=strategy.name,
            timeframe=strategy.timeframe,
            initial_balance=tracker.initial_balance,
            final_balance=tracker.balance,
            equity=list(tracker.equity),
            drawdown=list(tracker.drawdown),
            trades=list(tracker.trades),
        )
