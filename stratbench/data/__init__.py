from stratbench.data.loader import load_price_series
from stratbench.data.models import (
    BollingerBands,
    MACDInfo,
    MarketSnapshot,
    MovingAverages,
    Position,
    PriceRecord,
    Trade,
    TrendInfo,
)

__all__ = [
    "BollingerBands",
    "MACDInfo",
    "MarketSnapshot",
    "MovingAverages",
    "Position",
    "PriceRecord",
    "Trade",
    "TrendInfo",
    "load_price_series",
]
