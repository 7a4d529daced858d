"""Running portfolio state and position settlement for backtesting."""
from __future__ import annotations

import logging
from datetime import datetime

from stratbench.data.models import Direction, MarketSnapshot, Position, Trade
from stratbench.strategies.models import ExitAnalysis

logger = logging.getLogger(__name__)

STOP_LOSS_VOL_FACTOR = 0.5
TAKE_PROFIT_VOL_FACTOR = 1.5


class PortfolioTracker:
    """Source of truth for balance, positions, trades and the equity curve of one run.

    ``equity`` and ``drawdown`` start with the initial balance and 0; each
    ``mark_to_market`` call appends one entry. Drawdown is kept as a ratio.
    """

    def __init__(self, initial_balance: float, commission_rate: float = 0.0) -> None:
        self.initial_balance: float = initial_balance
        self.balance: float = initial_balance
        self.commission_rate: float = commission_rate
        self.positions: list[Position] = []
        self.trades: list[Trade] = []
        self.equity: list[float] = [initial_balance]
        self.drawdown: list[float] = [0.0]
        self.max_drawdown: float = 0.0
        self._peak: float = initial_balance

    def open_position(
        self,
        symbol: str,
        direction: Direction,
        entry_price: float,
        quantity: float,
        size: float,
        entry_time: datetime,
        confidence: float,
        volatility: float,
    ) -> Position:
        """Add a position with volatility-derived stop/target levels and charge entry commission."""
        stop_pct = volatility * STOP_LOSS_VOL_FACTOR / 100
        target_pct = volatility * TAKE_PROFIT_VOL_FACTOR / 100
        if direction == "BUY":
            stop_loss = entry_price * (1 - stop_pct)
            take_profit = entry_price * (1 + target_pct)
        else:
            stop_loss = entry_price * (1 + stop_pct)
            take_profit = entry_price * (1 - target_pct)

        position = Position(
            symbol=symbol,
            direction=direction,
            entry_price=entry_price,
            quantity=quantity,
            entry_time=entry_time,
            confidence=confidence,
            size=size,
            stop_loss=stop_loss,
            take_profit=take_profit,
        )
        commission = self.balance * size * self.commission_rate
        self.balance -= commission
        self.positions.append(position)

        logger.debug(
            f"Opened {direction} {quantity:.4f} {symbol} @ {entry_price:.4f} "
            f"(size={size:.3f}, commission={commission:.4f})"
        )
        return position

    def settle(
        self,
        position: Position,
        exit_price: float,
        exit_time: datetime,
        hold_time: float,
        exit_reason: str,
    ) -> Trade:
        """Credit net PnL for a closing position and record the trade.

        The caller is responsible for removing the position from ``positions``.
        """
        gross = (exit_price - position.entry_price) * position.quantity
        if position.direction == "SELL":
            gross = -gross
        commission = abs(gross) * self.commission_rate
        net = gross - commission
        notional = position.entry_price * position.quantity

        self.balance += net
        trade = Trade(
            symbol=position.symbol,
            direction=position.direction,
            entry_price=position.entry_price,
            exit_price=exit_price,
            quantity=position.quantity,
            entry_time=position.entry_time,
            exit_time=exit_time,
            hold_time=hold_time,
            profit_loss=net / notional * 100 if notional else 0.0,
            pnl=net,
            commission=commission,
            exit_reason=exit_reason,
            confidence=position.confidence,
        )
        self.trades.append(trade)

        logger.debug(
            f"Closed {position.direction} {position.symbol} @ {exit_price:.4f} "
            f"({exit_reason}): pnl={net:.4f}"
        )
        return trade

    def close_positions(self, exits: list[tuple[int, ExitAnalysis]], exit_time: datetime) -> list[Trade]:
        """Settle and remove positions flagged for exit.

        ``exits`` holds ``(index, exit_analysis)`` pairs in discovery order; they are
        processed last-first so the remaining indices stay valid.
        """
        trades = []
        for index, analysis in reversed(exits):
            position = self.positions[index]
            trades.append(self.settle(
                position, analysis.exit_price, exit_time, analysis.hold_time, analysis.exit_reason,
            ))
            del self.positions[index]
        return trades

    def close_all(self, final_price: float, final_time: datetime, reason: str) -> list[Trade]:
        """Force-close every open position at ``final_price``."""
        exits = [
            (i, ExitAnalysis(
                should_exit=True,
                exit_price=final_price,
                exit_reason=reason,
                hold_time=(final_time - pos.entry_time).total_seconds(),
            ))
            for i, pos in enumerate(self.positions)
        ]
        return self.close_positions(exits, final_time)

    def position_value(self, price: float) -> float:
        """Mark-to-market value of all open positions at ``price``."""
        return sum(price * pos.quantity for pos in self.positions)

    def mark_to_market(self, snapshot: MarketSnapshot) -> float:
        """Append total equity and drawdown at the snapshot's price. Returns the equity."""
        equity = self.balance + self.position_value(snapshot.current_price)
        self.equity.append(equity)

        self._peak = max(self._peak, equity)
        drawdown = (self._peak - equity) / self._peak if self._peak > 0 else 0.0
        self.drawdown.append(drawdown)
        if drawdown > self.max_drawdown:
            self.max_drawdown = drawdown
        return equity
