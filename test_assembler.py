import pytest
from pydantic import ValidationError

from conftest import HOUR, NOW, flat_rows, zigzag_rows
from engine.assembler import MIN_CANDLES, build_signal
from engine.classifier import classify_snapshot
from engine.levels import RiskTable
from indicators import compute_snapshot
from market_data.normalizer import FreshnessPolicy, normalize
from models import Decision, InsufficientDataError, StaleDataError, ZeroVolatilityError
from shared.models import SignalResult
from utils.timeframes import Timeframe


def test_uptrend_gives_buy_with_atr_levels(uptrend_rows, now):
    result = build_signal("BTCUSDT", uptrend_rows, "1h", now=now)

    assert result.status == "ok"
    assert result.decision == Decision.BUY
    assert result.timeframe == Timeframe.H1
    assert result.close == 31020.0
    assert result.entry == result.close
    assert result.stop_loss < result.entry < result.take_profit_1 < result.take_profit_2
    assert result.take_profit_2 - result.entry == pytest.approx(2 * (result.entry - result.stop_loss))
    # ATR14 = 35, множитель 1h = 1.0
    assert result.stop_loss == pytest.approx(30985.0)
    assert result.take_profit_1 == pytest.approx(31055.0)
    assert result.take_profit_2 == pytest.approx(31090.0)

    assert result.is_stale is False
    assert result.age_seconds == HOUR
    assert result.indicators.rsi14 == pytest.approx(60.0)


def test_downtrend_gives_sell(downtrend_rows, now):
    result = build_signal("ETHUSDT", downtrend_rows, Timeframe.H1, now=now)

    assert result.decision == Decision.SELL
    assert result.take_profit_2 < result.take_profit_1 < result.entry < result.stop_loss
    assert result.indicators.rsi14 == pytest.approx(40.0)


def test_choppy_market_is_neutral_without_levels(now):
    # последний бар вниз: close под EMA50, а RSI = 50 не даёт SELL
    rows = zigzag_rows(n=199, up=20.0, down=-20.0)
    result = build_signal("XAUUSD", rows, "1h", now=now)

    assert result.decision == Decision.NEUTRAL
    assert result.levels == [None, None, None, None]
    assert result.has_levels is False
    assert result.close is not None


def test_too_old_returns_unusable_before_counting_candles(now):
    rows = zigzag_rows(n=3, last_ts=NOW - 40 * HOUR)
    result = build_signal("BTCUSDT", rows, "1h", now=now)

    assert result.status == "unusable"
    assert result.decision is None
    assert result.too_old is True
    assert result.has_levels is False
    assert result.indicators is None


def test_few_fresh_candles_raise_insufficient(now):
    with pytest.raises(InsufficientDataError) as exc:
        build_signal("BTCUSDT", zigzag_rows(n=20), "1h", now=now)
    assert exc.value.required == MIN_CANDLES
    assert exc.value.available == 20


def test_stale_is_flagged_by_default_and_raised_in_strict_mode(now):
    rows = zigzag_rows(last_ts=NOW - 5 * HOUR)

    result = build_signal("BTCUSDT", rows, "1h", now=now)
    assert result.is_stale is True
    assert result.too_old is False
    assert result.decision == Decision.BUY

    with pytest.raises(StaleDataError):
        build_signal("BTCUSDT", rows, "1h", now=now, strict_freshness=True)


def test_custom_freshness_policy(now):
    rows = zigzag_rows(last_ts=NOW - 5 * HOUR)
    lenient = FreshnessPolicy(stale_multiplier=10, too_old_multiplier=10)
    assert build_signal("BTCUSDT", rows, "1h", now=now, policy=lenient).is_stale is False


def test_custom_risk_table(uptrend_rows, now):
    table = RiskTable.from_string("1h:2")
    result = build_signal("BTCUSDT", uptrend_rows, "1h", now=now, risk_table=table)
    assert result.entry - result.stop_loss == pytest.approx(70.0)


def test_flat_market_is_neutral_without_levels(now):
    result = build_signal("EURUSD", flat_rows(n=80), "1h", now=now)
    assert result.decision == Decision.NEUTRAL
    assert result.indicators.atr14 == 0.0
    assert result.has_levels is False


def _dip_then_flat_rows(base=100.0, dip=90.0, flat_before=100, dip_bars=5, flat_after=15):
    """
    Ровный рынок, короткий провал и возврат: последние 15 свечей без диапазона
    (ATR = 0), а EMA и MACD ещё восстанавливаются после провала.
    """
    closes = [base] * flat_before + [dip] * dip_bars + [base] * flat_after
    first_ts = NOW - HOUR - (len(closes) - 1) * HOUR
    rows = []
    prev = closes[0]
    for i, c in enumerate(closes):
        rows.append([(first_ts + i * HOUR) * 1000, prev, max(prev, c), min(prev, c), c, 1.0])
        prev = c
    return rows


def test_buy_with_zero_atr_raises_zero_volatility(now):
    rows = _dip_then_flat_rows()
    series = normalize(rows, "1h", now=now)
    snap = compute_snapshot(series)
    assert snap.atr14 == 0.0
    assert classify_snapshot(series.last.close, snap) == Decision.BUY

    with pytest.raises(ZeroVolatilityError):
        build_signal("EURUSD", rows, "1h", now=now)


def test_result_is_identical_for_identical_input(uptrend_rows, now):
    a = build_signal("BTCUSDT", uptrend_rows, "1h", now=now)
    b = build_signal("BTCUSDT", list(reversed(uptrend_rows)), "1h", now=now)
    assert a == b


def test_result_json_shape(uptrend_rows, now):
    data = build_signal("BTCUSDT", uptrend_rows, "1h", now=now).model_dump(mode="json")
    assert data["decision"] == "BUY"
    assert data["timeframe"] == "1h"
    assert data["last_candle_time_utc"].endswith("Z")
    assert set(data["indicators"]) >= {"ema20", "ema50", "rsi14", "macd_line", "macd_signal", "macd_hist", "atr14"}


def _base(**kw):
    fields = dict(
        symbol="BTCUSDT",
        timeframe="1h",
        last_candle_time_utc="2023-11-14T22:00:00Z",
        age_seconds=60,
        is_stale=False,
    )
    fields.update(kw)
    return fields


def test_validator_rejects_neutral_with_levels():
    with pytest.raises(ValidationError):
        SignalResult(**_base(decision=Decision.NEUTRAL, entry=1.0, stop_loss=0.9, take_profit_1=1.1, take_profit_2=1.2))


def test_validator_rejects_buy_without_levels():
    with pytest.raises(ValidationError):
        SignalResult(**_base(decision=Decision.BUY, entry=1.0))


def test_validator_rejects_unusable_with_decision():
    with pytest.raises(ValidationError):
        SignalResult(**_base(status="unusable", decision=Decision.SELL, too_old=True))


def test_result_is_immutable():
    result = SignalResult(**_base(decision=Decision.NEUTRAL))
    with pytest.raises(ValidationError):
        result.symbol = "ETHUSDT"
