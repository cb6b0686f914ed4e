import pytest

from engine.classifier import DEFAULT_RULE, DecisionRule, classify, classify_snapshot
from models import Decision, IndicatorSnapshot

# close, ema20, ema50 для бычьей и медвежьей структуры
BULL = dict(close=110.0, ema20=105.0, ema50=100.0)
BEAR = dict(close=90.0, ema20=95.0, ema50=100.0)


def _bull(rsi, macd_line=1.0, macd_signal=0.5, **kw):
    return classify(rsi=rsi, macd_line=macd_line, macd_signal=macd_signal, **{**BULL, **kw})


def _bear(rsi, macd_line=-1.0, macd_signal=-0.5, **kw):
    return classify(rsi=rsi, macd_line=macd_line, macd_signal=macd_signal, **{**BEAR, **kw})


def test_default_rule_constants():
    assert DEFAULT_RULE == DecisionRule(buy_rsi_pivot=55, buy_rsi_min_distance=1, sell_rsi_max=45)


def test_basic_buy_and_sell():
    assert _bull(60) == Decision.BUY
    assert _bear(40) == Decision.SELL


@pytest.mark.parametrize(
    "rsi, expected",
    [
        (56.0, Decision.NEUTRAL),   # расстояние ровно 1, не строго больше
        (54.0, Decision.NEUTRAL),
        (55.0, Decision.NEUTRAL),
        (56.01, Decision.BUY),
        (53.99, Decision.BUY),
        (40.0, Decision.BUY),       # перепроданность в бычьей структуре тоже проходит
        (90.0, Decision.BUY),
    ],
)
def test_buy_rsi_distance_band(rsi, expected):
    assert _bull(rsi) == expected


@pytest.mark.parametrize(
    "rsi, expected",
    [
        (45.0, Decision.SELL),
        (45.01, Decision.NEUTRAL),
        (10.0, Decision.SELL),
    ],
)
def test_sell_rsi_ceiling(rsi, expected):
    assert _bear(rsi) == expected


def test_equal_macd_and_signal_is_neutral():
    assert _bull(60, macd_line=0.5, macd_signal=0.5) == Decision.NEUTRAL
    assert _bear(40, macd_line=-0.5, macd_signal=-0.5) == Decision.NEUTRAL


def test_close_on_ema50_is_neutral():
    assert _bull(60, close=100.0) == Decision.NEUTRAL
    assert _bear(40, close=100.0) == Decision.NEUTRAL


def test_mixed_structure_is_neutral():
    # цена выше EMA50, но EMA20 под ней
    assert _bull(60, ema20=99.0) == Decision.NEUTRAL
    # медвежья структура, но MACD выше сигнала
    assert _bear(40, macd_line=0.1, macd_signal=0.0) == Decision.NEUTRAL


def test_custom_rule():
    rule = DecisionRule(buy_rsi_pivot=50, buy_rsi_min_distance=5, sell_rsi_max=30)
    assert classify(rsi=54, macd_line=1, macd_signal=0, rule=rule, **BULL) == Decision.NEUTRAL
    assert classify(rsi=56, macd_line=1, macd_signal=0, rule=rule, **BULL) == Decision.BUY
    assert classify(rsi=40, macd_line=-1, macd_signal=0, rule=rule, **BEAR) == Decision.NEUTRAL
    assert classify(rsi=30, macd_line=-1, macd_signal=0, rule=rule, **BEAR) == Decision.SELL


def test_classify_snapshot_reads_snapshot_fields():
    snap = IndicatorSnapshot(
        ema20=105.0, ema50=100.0, rsi14=62.0,
        macd_line=1.2, macd_signal=0.8, macd_hist=0.4, atr14=3.0,
    )
    assert classify_snapshot(110.0, snap) == Decision.BUY
    assert classify_snapshot(99.0, snap) == Decision.NEUTRAL
