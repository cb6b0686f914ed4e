from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Tuple

from utils.timeframes import Timeframe

from .errors import (
    DataFeedError,
    InsufficientDataError,
    NoDataError,
    SignalEngineError,
    StaleDataError,
    TooOldError,
    ZeroVolatilityError,
)


class Decision(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Candle:
    """
    Каноническая свеча: время в epoch-секундах, OHLC во float.
    Создаётся только нормализатором, после этого не меняется.
    """
    timestamp: int
    open: float
    high: float
    low: float
    close: float


@dataclass(frozen=True)
class RawBar:
    """
    Бар после адаптера провайдера, но до проверки.
    timestamp может быть в секундах, миллисекундах или ISO-строкой,
    OHLC могут быть строками или отсутствовать.
    """
    timestamp: object
    open: object = None
    high: object = None
    low: object = None
    close: object = None


@dataclass(frozen=True)
class FreshnessVerdict:
    age_seconds: int
    is_stale: bool
    too_old: bool
    stale_threshold: int
    too_old_threshold: int


@dataclass(frozen=True)
class CandleSeries:
    timeframe: Timeframe
    candles: Tuple[Candle, ...]
    freshness: FreshnessVerdict

    def __len__(self) -> int:
        return len(self.candles)

    @property
    def last(self) -> Candle:
        return self.candles[-1]

    @property
    def closes(self) -> list[float]:
        return [c.close for c in self.candles]

    @property
    def last_time_utc(self) -> str:
        dt = datetime.fromtimestamp(self.last.timestamp, tz=timezone.utc)
        return dt.strftime("%Y-%m-%dT%H:%M:%SZ")

    def require_usable(self) -> "CandleSeries":
        if self.freshness.too_old:
            raise TooOldError(self.freshness.age_seconds, self.freshness.too_old_threshold)
        return self

    def require_fresh(self) -> "CandleSeries":
        self.require_usable()
        if self.freshness.is_stale:
            raise StaleDataError(self.freshness.age_seconds, self.freshness.stale_threshold)
        return self


@dataclass(frozen=True)
class IndicatorSnapshot:
    """
    Значения индикаторов на последней свече ряда.
    Пересчитываются с нуля на каждый запрос.
    """
    ema20: float
    ema50: float
    rsi14: float
    macd_line: float
    macd_signal: float
    macd_hist: float
    atr14: float


@dataclass(frozen=True)
class TradeLevels:
    entry: float
    sl: float
    tp1: float
    tp2: float


__all__ = [
    "Decision",
    "Candle",
    "RawBar",
    "FreshnessVerdict",
    "CandleSeries",
    "IndicatorSnapshot",
    "TradeLevels",
    "Timeframe",
    "SignalEngineError",
    "NoDataError",
    "InsufficientDataError",
    "StaleDataError",
    "TooOldError",
    "ZeroVolatilityError",
    "DataFeedError",
]
