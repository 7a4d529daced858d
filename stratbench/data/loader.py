"""Load historical price series from CSV or JSON files."""
from __future__ import annotations

import logging
import os

import pandas as pd

from stratbench.data.models import PriceRecord

logger = logging.getLogger(__name__)

_COLUMN_ALIASES = {
    "close": "price",
    "date": "timestamp",
    "time": "timestamp",
}


def _read_frame(path: str) -> pd.DataFrame:
    _, ext = os.path.splitext(path)
    ext = ext.lower()
    if ext == ".csv":
        return pd.read_csv(path)
    if ext == ".json":
        return pd.read_json(path, convert_dates=False)
    raise ValueError(f"Unsupported price file format: '{ext}'. Use .csv or .json")


def load_price_series(path: str) -> list[PriceRecord]:
    """Read a price file into PriceRecords in file order.

    Requires ``timestamp`` and ``price`` columns (``date``/``time`` and ``close``
    are accepted as aliases). Rows without a usable timestamp or price are
    dropped. Any additional columns ride along as signal attributes.
    """
    df = _read_frame(path)
    df.columns = [str(col).strip().lower() for col in df.columns]
    df = df.rename(columns={
        col: _COLUMN_ALIASES[col]
        for col in df.columns
        if col in _COLUMN_ALIASES and _COLUMN_ALIASES[col] not in df.columns
    })

    missing = {"timestamp", "price"} - set(df.columns)
    if missing:
        raise ValueError(f"Price file {path} is missing required columns: {sorted(missing)}")

    if pd.api.types.is_numeric_dtype(df["timestamp"]):
        # Epoch seconds
        df["timestamp"] = pd.to_datetime(df["timestamp"], unit="s", errors="coerce")
    else:
        df["timestamp"] = pd.to_datetime(df["timestamp"], errors="coerce")

    before = len(df)
    df = df.dropna(subset=["timestamp", "price"])
    if len(df) < before:
        logger.warning(f"Dropped {before - len(df)} rows without a timestamp or price from {path}")

    if "volume" not in df.columns:
        df["volume"] = 0.0
    df["volume"] = df["volume"].fillna(0.0)

    records = []
    for row in df.to_dict(orient="records"):
        row["timestamp"] = row["timestamp"].to_pydatetime()
        records.append(PriceRecord(**row))

    logger.debug(f"Loaded {len(records)} price records from {path}")
    return records
