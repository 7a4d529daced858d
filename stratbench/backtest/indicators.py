"""Technical indicators computed over a trailing window of a price series.

Every function takes ``(prices, index, period)`` and only looks at
``prices[max(0, index - period + 1) .. index]``. Windows that are too short for
a meaningful value return a neutral default instead of raising.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

from stratbench.data.models import BollingerBands, MACDInfo, MovingAverages, TrendInfo

TREND_THRESHOLD = 0.02
SUPPORT_FACTOR = 0.98
RESISTANCE_FACTOR = 1.02


def window(prices: Sequence[float], index: int, period: int) -> np.ndarray:
    """Return the trailing window ending at ``index`` (inclusive)."""
    start = max(0, index - period + 1)
    return np.asarray(prices[start:index + 1], dtype=float)


def volatility(prices: Sequence[float], index: int, period: int = 20) -> float:
    """Population std of simple returns over the window, in percent."""
    w = window(prices, index, period)
    if len(w) < 2:
        return 0.0
    prev = w[:-1]
    valid = prev != 0
    if not valid.any():
        return 0.0
    returns = np.diff(w)[valid] / prev[valid]
    return float(np.std(returns) * 100)


def support(prices: Sequence[float], index: int, period: int = 20) -> float:
    w = window(prices, index, period)
    if len(w) == 0:
        return 0.0
    return float(np.min(w) * SUPPORT_FACTOR)


def resistance(prices: Sequence[float], index: int, period: int = 20) -> float:
    w = window(prices, index, period)
    if len(w) == 0:
        return 0.0
    return float(np.max(w) * RESISTANCE_FACTOR)


def trend(prices: Sequence[float], index: int, period: int = 20) -> TrendInfo:
    """Direction and strength of the move from the first to the last window price."""
    w = window(prices, index, period)
    if len(w) < 2 or w[0] == 0:
        return TrendInfo()

    change = (w[-1] - w[0]) / w[0]
    if change > TREND_THRESHOLD:
        direction = "up"
    elif change < -TREND_THRESHOLD:
        direction = "down"
    else:
        direction = "neutral"
    return TrendInfo(direction=direction, strength=float(abs(change) * 10))


def rsi(prices: Sequence[float], index: int, period: int = 14) -> float:
    """Relative strength index from average gain/loss over the window.

    Returns 50 when the window has fewer than two prices or no movement at all,
    and 100 when there were gains but no losses.
    """
    w = window(prices, index, period)
    if len(w) < 2:
        return 50.0
    deltas = np.diff(w)
    avg_gain = float(np.mean(np.where(deltas > 0, deltas, 0.0)))
    avg_loss = float(np.mean(np.where(deltas < 0, -deltas, 0.0)))
    if avg_loss == 0:
        return 50.0 if avg_gain == 0 else 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def ema(values: Sequence[float], index: int, period: int) -> float:
    """Exponential moving average seeded with the first window value."""
    w = window(values, index, period)
    if len(w) == 0:
        return 0.0
    multiplier = 2 / (period + 1)
    result = float(w[0])
    for v in w[1:]:
        result = float(v) * multiplier + result * (1 - multiplier)
    return result


def macd(
    prices: Sequence[float],
    index: int,
    fast: int = 12,
    slow: int = 26,
    signal_period: int = 9,
) -> MACDInfo:
    """MACD line, its signal line (EMA of the trailing MACD values) and histogram."""
    if index < 0 or len(prices) == 0:
        return MACDInfo()

    start = max(0, index - signal_period + 1)
    macd_series = [
        ema(prices, j, fast) - ema(prices, j, slow)
        for j in range(start, index + 1)
    ]
    macd_line = macd_series[-1]
    signal_line = ema(macd_series, len(macd_series) - 1, signal_period)
    return MACDInfo(
        macd=macd_line,
        signal=signal_line,
        histogram=macd_line - signal_line,
    )


def bollinger_bands(
    prices: Sequence[float],
    index: int,
    period: int = 20,
    num_std: float = 2.0,
) -> BollingerBands:
    """SMA +/- ``num_std`` population standard deviations. Needs a full window."""
    w = window(prices, index, period)
    if len(w) < period:
        return BollingerBands()
    middle = float(np.mean(w))
    std = float(np.std(w))
    return BollingerBands(
        upper=middle + num_std * std,
        middle=middle,
        lower=middle - num_std * std,
        current=float(w[-1]),
    )


def sma(prices: Sequence[float], index: int, period: int) -> float:
    w = window(prices, index, period)
    if len(w) == 0:
        return 0.0
    return float(np.mean(w))


def moving_averages(prices: Sequence[float], index: int) -> MovingAverages:
    return MovingAverages(
        sma20=sma(prices, index, 20),
        sma50=sma(prices, index, 50),
        sma200=sma(prices, index, 200),
    )
