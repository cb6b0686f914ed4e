# utils/timeframes.py
from enum import Enum
from typing import Union

import ccxt


class Timeframe(str, Enum):
    M1 = "1m"
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H4 = "4h"
    D1 = "1d"

    def __str__(self) -> str:
        return self.value


# Написание интервалов у FMP/FCS
_PROVIDER_ALIASES = {
    "1min": Timeframe.M1,
    "5min": Timeframe.M5,
    "15min": Timeframe.M15,
    "30min": Timeframe.M30,
    "1hour": Timeframe.H1,
    "4hour": Timeframe.H4,
    "1day": Timeframe.D1,
}


def parse_timeframe(value: Union[Timeframe, str]) -> Timeframe:
    if isinstance(value, Timeframe):
        return value
    key = (value or "").strip().lower()
    try:
        return Timeframe(key)
    except ValueError:
        pass
    if key in _PROVIDER_ALIASES:
        return _PROVIDER_ALIASES[key]
    raise ValueError(f"unsupported timeframe: {value!r}")


def tf_seconds(timeframe: Union[Timeframe, str]) -> int:
    """
    Унифицированная функция перевода таймфрейма в секунды.
    Используется нормализатором (порог свежести) и фидом.
    """
    return ccxt.Exchange.parse_timeframe(parse_timeframe(timeframe).value)
