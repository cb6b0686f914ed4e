# engine/assembler.py
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Union

from indicators import compute_snapshot
from market_data.normalizer import DEFAULT_FRESHNESS, FreshnessPolicy, normalize
from models import CandleSeries, Decision, InsufficientDataError
from shared.models import SignalResult
from utils.timeframes import Timeframe, parse_timeframe

from .classifier import DecisionRule, classify_snapshot
from .levels import RiskTable, compute_levels

logger = logging.getLogger(__name__)

# Самое длинное окно среди индикаторов: EMA50
MIN_CANDLES = 50


def unusable_result(symbol: str, series: CandleSeries) -> SignalResult:
    return SignalResult(
        symbol=symbol,
        timeframe=series.timeframe,
        status="unusable",
        last_candle_time_utc=series.last_time_utc,
        age_seconds=series.freshness.age_seconds,
        is_stale=series.freshness.is_stale,
        too_old=True,
    )


def signal_from_series(
    symbol: str,
    series: CandleSeries,
    strict_freshness: bool = False,
    rule: Optional[DecisionRule] = None,
    risk_table: Optional[RiskTable] = None,
) -> SignalResult:
    """
    Нормализованный ряд -> SignalResult.

    tooOld -> результат "unusable" без решения.
    Меньше MIN_CANDLES свечей -> InsufficientDataError (это не NEUTRAL).
    """
    freshness = series.freshness
    if freshness.too_old:
        logger.warning(
            "⚠️ %s %s: данные слишком старые (age=%ss), сигнал не считаем",
            symbol, series.timeframe, freshness.age_seconds,
        )
        return unusable_result(symbol, series)

    if strict_freshness:
        series.require_fresh()

    if len(series) < MIN_CANDLES:
        raise InsufficientDataError("signal", MIN_CANDLES, len(series))

    snapshot = compute_snapshot(series)
    close = series.last.close
    decision = classify_snapshot(close, snapshot, rule=rule)
    levels = compute_levels(decision, close, snapshot.atr14, series.timeframe, risk_table=risk_table)

    result = SignalResult(
        symbol=symbol,
        timeframe=series.timeframe,
        status="ok",
        decision=decision,
        entry=levels.entry if levels else None,
        stop_loss=levels.sl if levels else None,
        take_profit_1=levels.tp1 if levels else None,
        take_profit_2=levels.tp2 if levels else None,
        close=close,
        last_candle_time_utc=series.last_time_utc,
        age_seconds=freshness.age_seconds,
        is_stale=freshness.is_stale,
        too_old=False,
        indicators=snapshot,
    )

    if decision != Decision.NEUTRAL:
        logger.info(
            "SIGNAL %s %s %s entry=%.6f sl=%.6f tp1=%.6f tp2=%.6f stale=%s",
            symbol, series.timeframe, decision,
            result.entry, result.stop_loss, result.take_profit_1, result.take_profit_2,
            result.is_stale,
        )
    return result


def build_signal(
    symbol: str,
    raw_candles: Iterable[Any],
    timeframe: Union[Timeframe, str],
    now: Optional[float] = None,
    policy: FreshnessPolicy = DEFAULT_FRESHNESS,
    strict_freshness: bool = False,
    rule: Optional[DecisionRule] = None,
    risk_table: Optional[RiskTable] = None,
) -> SignalResult:
    """normalize -> (tooOld?) -> индикаторы -> решение -> уровни -> SignalResult."""
    timeframe = parse_timeframe(timeframe)
    series = normalize(raw_candles, timeframe, now=now, policy=policy)
    return signal_from_series(
        symbol,
        series,
        strict_freshness=strict_freshness,
        rule=rule,
        risk_table=risk_table,
    )
