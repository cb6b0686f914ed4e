# indicators/snapshot.py
from models import CandleSeries, IndicatorSnapshot, InsufficientDataError

from .atr import atr14
from .ema import ema
from .macd import MACD_WINDOW, macd
from .rsi import rsi14

INDICATOR_WINDOW = MACD_WINDOW


def compute_snapshot(series: CandleSeries) -> IndicatorSnapshot:
    """
    Все индикаторы на последней свече.
    EMA20/EMA50/MACD по последним INDICATOR_WINDOW закрытиям,
    RSI по 15 закрытиям, ATR по 15 свечам.
    """
    closes = series.closes
    window = closes[-INDICATOR_WINDOW:]

    for period in (20, 50):
        if len(window) < period:
            raise InsufficientDataError(f"EMA{period}", period, len(window))

    m = macd(closes)
    return IndicatorSnapshot(
        ema20=ema(window, 20),
        ema50=ema(window, 50),
        rsi14=rsi14(closes),
        macd_line=m.line,
        macd_signal=m.signal,
        macd_hist=m.hist,
        atr14=atr14(series.candles),
    )
