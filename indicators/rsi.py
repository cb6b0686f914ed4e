# indicators/rsi.py
from typing import Sequence

from models import InsufficientDataError

RSI_PERIOD = 14
RSI_EPSILON = 1e-12


def rsi14(closes: Sequence[float]) -> float:
    """
    RSI-14 по последним 14 изменениям цены (без сглаживания Wilder):
      gain = сумма положительных изменений, loss = сумма |отрицательных|,
      rs = gain / max(loss, eps), rsi = 100 - 100 / (1 + rs).
    Полностью плоское окно (gain == loss == 0) даёт ровно 50.
    """
    if len(closes) < RSI_PERIOD + 1:
        raise InsufficientDataError("RSI14", RSI_PERIOD + 1, len(closes))

    window = closes[-(RSI_PERIOD + 1):]
    gain = 0.0
    loss = 0.0
    for prev, cur in zip(window, window[1:]):
        diff = cur - prev
        if diff > 0:
            gain += diff
        elif diff < 0:
            loss -= diff

    if gain == 0.0 and loss == 0.0:
        return 50.0

    rs = gain / max(loss, RSI_EPSILON)
    return 100.0 - 100.0 / (1.0 + rs)
