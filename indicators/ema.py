# indicators/ema.py
from typing import List, Sequence

from models import InsufficientDataError


def ema_series(values: Sequence[float], period: int) -> List[float]:
    """
    EMA как бегущий ряд той же длины, что и вход.
    Затравка: первое значение окна (не SMA), дальше
    e = x * k + e * (1 - k), k = 2 / (period + 1).
    """
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")
    if not values:
        raise InsufficientDataError(f"EMA{period}", 1, 0)

    k = 2.0 / (period + 1)
    e = float(values[0])
    out = [e]
    for x in values[1:]:
        e = float(x) * k + e * (1.0 - k)
        out.append(e)
    return out


def ema(values: Sequence[float], period: int) -> float:
    return ema_series(values, period)[-1]
