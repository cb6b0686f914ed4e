# indicators/macd.py
from dataclasses import dataclass
from typing import Sequence

from models import InsufficientDataError

from .ema import ema_series

MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9
MACD_WINDOW = 120


@dataclass(frozen=True)
class MacdResult:
    line: float
    signal: float
    hist: float


def macd(closes: Sequence[float]) -> MacdResult:
    """
    MACD(12, 26, 9) по последним MACD_WINDOW закрытиям.
    EMA12/EMA26 считаются рядами, сигнальная линия = EMA9
    от всего ряда MACD, а не только от последней точки.
    """
    if len(closes) < MACD_SLOW:
        raise InsufficientDataError("MACD", MACD_SLOW, len(closes))

    window = list(closes[-MACD_WINDOW:])
    fast = ema_series(window, MACD_FAST)
    slow = ema_series(window, MACD_SLOW)
    line = [f - s for f, s in zip(fast, slow)]
    signal = ema_series(line, MACD_SIGNAL)

    last_line = line[-1]
    last_signal = signal[-1]
    return MacdResult(line=last_line, signal=last_signal, hist=last_line - last_signal)
