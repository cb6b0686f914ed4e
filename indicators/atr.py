# indicators/atr.py
from typing import List, Sequence

from models import Candle, InsufficientDataError

ATR_PERIOD = 14


def true_ranges(candles: Sequence[Candle]) -> List[float]:
    """TR для каждой свечи, у которой есть предыдущая: len(candles) - 1 значений."""
    out = []
    for prev, cur in zip(candles, candles[1:]):
        out.append(
            max(
                cur.high - cur.low,
                abs(cur.high - prev.close),
                abs(cur.low - prev.close),
            )
        )
    return out


def atr14(candles: Sequence[Candle]) -> float:
    """Простое среднее TR за последние 14 свечей (не Wilder)."""
    if len(candles) < ATR_PERIOD + 1:
        raise InsufficientDataError("ATR14", ATR_PERIOD + 1, len(candles))

    tr = true_ranges(candles[-(ATR_PERIOD + 1):])
    return sum(tr) / ATR_PERIOD
