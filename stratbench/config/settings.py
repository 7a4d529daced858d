"""Environment settings loaded from .env file."""
import os

from dotenv import load_dotenv

load_dotenv()

# --- Account ---
DEFAULT_INITIAL_BALANCE: float = float(os.getenv("STRATBENCH_INITIAL_BALANCE", "10000"))
DEFAULT_COMMISSION_RATE: float = float(os.getenv("STRATBENCH_COMMISSION_RATE", "0.001"))

# --- Metrics ---
DEFAULT_RISK_FREE_RATE: float = float(os.getenv("STRATBENCH_RISK_FREE_RATE", "0.0"))

# --- Backtest span (used for annualized return) ---
DEFAULT_START_DATE: str = os.getenv("STRATBENCH_START_DATE", "2023-01-01")
DEFAULT_END_DATE: str = os.getenv("STRATBENCH_END_DATE", "2024-01-01")

# --- Market ---
DEFAULT_SYMBOL: str = os.getenv("STRATBENCH_SYMBOL", "UNKNOWN")
