"""Market data and position models shared by strategies and the backtester."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, field_validator

Direction = Literal["BUY", "SELL"]


class PriceRecord(BaseModel):
    """A single historical price point.

    Extra attributes (e.g. ``final_score`` from an upstream signal feed) are kept
    and handed to strategies as signal data.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    timestamp: datetime
    price: float
    volume: float = 0.0

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        """Reject NaT and store aware timestamps as naive UTC so all records compare."""
        if pd.isna(v):
            raise ValueError("timestamp is missing")
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


# ── Market snapshot ─────────────────────────────────────────────────


class TrendInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    direction: Literal["up", "down", "neutral"] = "neutral"
    strength: float = 0.0


class MACDInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    macd: float = 0.0
    signal: float = 0.0
    histogram: float = 0.0


class BollingerBands(BaseModel):
    """Bands are all zero (and ``current`` is None) until the window is full."""
    model_config = ConfigDict(frozen=True)

    upper: float = 0.0
    middle: float = 0.0
    lower: float = 0.0
    current: Optional[float] = None


class MovingAverages(BaseModel):
    model_config = ConfigDict(frozen=True)

    sma20: float = 0.0
    sma50: float = 0.0
    sma200: float = 0.0


class MarketSnapshot(BaseModel):
    """Point-in-time market view handed to strategies at each step."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    symbol: str = "UNKNOWN"
    current_price: float
    volume: float
    volatility: float  # percent
    spread: float  # percent
    support: float
    resistance: float
    trend: TrendInfo
    rsi: float
    macd: MACDInfo
    bollinger: BollingerBands
    moving_averages: MovingAverages


# ── Positions and trades ────────────────────────────────────────────


class Position(BaseModel):
    """An open position inside one backtest portfolio."""
    symbol: str
    direction: Direction
    entry_price: float
    quantity: float
    entry_time: datetime
    confidence: float = 0.0
    size: float = 0.0  # fraction of balance committed at entry
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None


class Trade(BaseModel):
    """A closed position. Immutable once recorded."""
    model_config = ConfigDict(frozen=True)

    symbol: str
    direction: Direction
    entry_price: float
    exit_price: float
    quantity: float
    entry_time: datetime
    exit_time: datetime
    hold_time: float  # seconds
    profit_loss: float  # net pnl as % of entry notional
    pnl: float  # net, in account currency
    commission: float
    exit_reason: str
    confidence: float = 0.0
