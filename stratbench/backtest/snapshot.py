"""Build per-step market snapshots from a sorted price series."""
from __future__ import annotations

import logging
import math
from typing import Iterable, Union

import numpy as np
from pydantic import ValidationError

from stratbench.backtest import indicators
from stratbench.data.models import MarketSnapshot, PriceRecord

logger = logging.getLogger(__name__)

# Placeholder until a bid/ask feed exists; always this value.
DEFAULT_SPREAD = 0.1  # percent

WINDOW_PERIOD = 20
RSI_PERIOD = 14


def sort_records(records: Iterable[Union[PriceRecord, dict]]) -> list[PriceRecord]:
    """Return a new list sorted by timestamp. Ties keep their input order.

    Records that fail validation or carry a non-finite price are skipped.
    """
    parsed: list[PriceRecord] = []
    for raw in records:
        try:
            record = raw if isinstance(raw, PriceRecord) else PriceRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Skipping invalid price record {raw!r}: {e.error_count()} errors")
            continue
        if not math.isfinite(record.price):
            logger.warning(f"Skipping price record at {record.timestamp} with price {record.price}")
            continue
        parsed.append(record)
    return sorted(parsed, key=lambda r: r.timestamp)


class MarketSnapshotBuilder:
    """Compute the full indicator view for any index of a sorted series."""

    def __init__(self, records: list[PriceRecord], symbol: str = "UNKNOWN") -> None:
        self.records = records
        self.symbol = symbol
        self.prices = np.array([r.price for r in records], dtype=float)

    def __len__(self) -> int:
        return len(self.records)

    def build(self, index: int) -> MarketSnapshot:
        record = self.records[index]
        prices = self.prices
        return MarketSnapshot(
            timestamp=record.timestamp,
            symbol=self.symbol,
            current_price=record.price,
            volume=record.volume,
            volatility=indicators.volatility(prices, index, WINDOW_PERIOD),
            spread=DEFAULT_SPREAD,
            support=indicators.support(prices, index, WINDOW_PERIOD),
            resistance=indicators.resistance(prices, index, WINDOW_PERIOD),
            trend=indicators.trend(prices, index, WINDOW_PERIOD),
            rsi=indicators.rsi(prices, index, RSI_PERIOD),
            macd=indicators.macd(prices, index),
            bollinger=indicators.bollinger_bands(prices, index, WINDOW_PERIOD),
            moving_averages=indicators.moving_averages(prices, index),
        )
