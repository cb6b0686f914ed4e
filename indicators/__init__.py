#__init__.py
from .atr import ATR_PERIOD, atr14, true_ranges
from .ema import ema, ema_series
from .macd import MacdResult, macd
from .rsi import RSI_PERIOD, rsi14
from .snapshot import INDICATOR_WINDOW, compute_snapshot

__all__ = [
    "ATR_PERIOD",
    "atr14",
    "true_ranges",
    "ema",
    "ema_series",
    "MacdResult",
    "macd",
    "RSI_PERIOD",
    "rsi14",
    "INDICATOR_WINDOW",
    "compute_snapshot",
]
