# market_data/normalizer.py
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from models import Candle, CandleSeries, FreshnessVerdict, NoDataError, RawBar
from utils.timeframes import Timeframe, parse_timeframe, tf_seconds

from .adapters import to_epoch_seconds, to_raw_bar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FreshnessPolicy:
    """
    Политика свежести:
      - stale: возраст > max(floor, stale_multiplier * длительность бара)
      - too old: возраст > too_old_multiplier * stale-порог
    """
    stale_multiplier: float = 3.0
    too_old_multiplier: float = 10.0
    stale_floor_seconds: int = 300

    def stale_threshold(self, timeframe: Union[Timeframe, str]) -> int:
        bar = tf_seconds(timeframe)
        return int(max(self.stale_floor_seconds, self.stale_multiplier * bar))

    def too_old_threshold(self, timeframe: Union[Timeframe, str]) -> int:
        return int(self.too_old_multiplier * self.stale_threshold(timeframe))

    def table(self) -> Dict[Timeframe, Tuple[int, int]]:
        return {tf: (self.stale_threshold(tf), self.too_old_threshold(tf)) for tf in Timeframe}


DEFAULT_FRESHNESS = FreshnessPolicy()


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def to_candle(bar: RawBar) -> Optional[Candle]:
    """
    RawBar -> Candle. None, если не хватает поля
    или нарушен инвариант high/low.
    """
    ts = to_epoch_seconds(bar.timestamp)
    o = _to_float(bar.open)
    h = _to_float(bar.high)
    l = _to_float(bar.low)
    c = _to_float(bar.close)
    if ts is None or o is None or h is None or l is None or c is None:
        return None
    if h < max(o, c) or l > min(o, c):
        return None
    return Candle(timestamp=ts, open=o, high=h, low=l, close=c)


def assess_freshness(
    last_timestamp: int,
    timeframe: Union[Timeframe, str],
    now: Optional[float] = None,
    policy: FreshnessPolicy = DEFAULT_FRESHNESS,
) -> FreshnessVerdict:
    if now is None:
        now = time.time()
    age = max(0, int(now) - int(last_timestamp))
    stale_threshold = policy.stale_threshold(timeframe)
    too_old_threshold = policy.too_old_threshold(timeframe)
    return FreshnessVerdict(
        age_seconds=age,
        is_stale=age > stale_threshold,
        too_old=age > too_old_threshold,
        stale_threshold=stale_threshold,
        too_old_threshold=too_old_threshold,
    )


def normalize(
    raw: Iterable[Any],
    timeframe: Union[Timeframe, str],
    now: Optional[float] = None,
    policy: FreshnessPolicy = DEFAULT_FRESHNESS,
) -> CandleSeries:
    """
    Сырые бары любого провайдера -> CandleSeries по возрастанию времени.

    Бары без обязательного поля или с нарушением high/low отбрасываются.
    При одинаковом timestamp побеждает бар, пришедший последним.
    Пустой результат -> NoDataError.
    """
    timeframe = parse_timeframe(timeframe)

    by_ts: Dict[int, Candle] = {}
    total = 0
    dropped = 0
    for row in raw or []:
        total += 1
        bar = to_raw_bar(row)
        candle = to_candle(bar) if bar is not None else None
        if candle is None:
            dropped += 1
            continue
        by_ts[candle.timestamp] = candle

    if not by_ts:
        logger.warning("⚠️ %s: нет валидных свечей (получено %d)", timeframe, total)
        raise NoDataError(f"no valid candles for {timeframe} (received {total})")

    candles: List[Candle] = [by_ts[ts] for ts in sorted(by_ts)]
    freshness = assess_freshness(candles[-1].timestamp, timeframe, now=now, policy=policy)

    logger.info(
        "OHLC tf=%s bars=%d dropped=%d dup=%d lastTs=%d age=%ss stale=%s tooOld=%s",
        timeframe,
        len(candles),
        dropped,
        total - dropped - len(candles),
        candles[-1].timestamp,
        freshness.age_seconds,
        freshness.is_stale,
        freshness.too_old,
    )

    return CandleSeries(timeframe=timeframe, candles=tuple(candles), freshness=freshness)
