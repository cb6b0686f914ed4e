import pytest

from models import DataFeedError, Decision, InsufficientDataError, NoDataError, StaleDataError, TooOldError
from shared.models import SignalResult
from signal_formatter import format_error, format_help, format_price, format_signal


def _result(decision=Decision.BUY, symbol="BTCUSDT", is_stale=False, age=60, **kw):
    levels = {}
    if decision in (Decision.BUY, Decision.SELL):
        levels = dict(entry=31020.0, stop_loss=30985.0, take_profit_1=31055.0, take_profit_2=31090.0)
    fields = dict(
        symbol=symbol,
        timeframe="1h",
        decision=decision,
        close=31020.0,
        last_candle_time_utc="2023-11-14T22:00:00Z",
        age_seconds=age,
        is_stale=is_stale,
        **levels,
    )
    fields.update(kw)
    return SignalResult(**fields)


def test_english_buy_block():
    text = format_signal(_result())
    assert text.splitlines() == [
        "time (UTC): 2023-11-14 22:00",
        "symbol: BTCUSDT",
        "timeframe: 1h",
        "🟢 SIGNAL: BUY",
        "Entry: 31020.00",
        "SL: 30985.00",
        "TP1: 31055.00",
        "TP2: 31090.00",
    ]


def test_arabic_sell_block():
    text = format_signal(_result(Decision.SELL), lang="ar")
    assert "🔴 الإشارة: بيع (SELL)" in text
    assert "وقف الخسارة: 30985.00" in text
    assert "الهدف 2: 31090.00" in text


def test_neutral_has_no_levels_block():
    text = format_signal(_result(Decision.NEUTRAL))
    assert "⚪ SIGNAL: NEUTRAL" in text
    assert "Entry" not in text


def test_stale_neutral_is_one_line():
    assert format_signal(_result(Decision.NEUTRAL, is_stale=True, age=4 * 3600)) == (
        "No clear signal right now (data is delayed)."
    )
    assert format_signal(_result(Decision.NEUTRAL, is_stale=True), lang="ar") == (
        "مافي إشارة واضحة حالياً (البيانات متأخرة)."
    )


def test_stale_trade_keeps_levels_with_warning():
    text = format_signal(_result(is_stale=True, age=4 * 3600))
    lines = text.splitlines()
    assert lines[0] == "⚠️ Warning: data is delayed by ~240 minutes"
    assert "Entry: 31020.00" in lines


def test_unusable_result():
    result = SignalResult(
        symbol="XAUUSD",
        timeframe="1h",
        status="unusable",
        last_candle_time_utc="2023-11-13T06:00:00Z",
        age_seconds=40 * 3600,
        is_stale=True,
        too_old=True,
    )
    assert format_signal(result).startswith("⛔ XAUUSD (1h)")
    assert format_signal(result, lang="ar").startswith("⛔")


def test_local_timezone_label():
    text = format_signal(_result(), tz="Asia/Riyadh")
    assert text.splitlines()[0] == "time (Asia/Riyadh): 2023-11-15 01:00"


@pytest.mark.parametrize(
    "value, symbol, expected",
    [
        (1.234567, "BTCUSDT", "1.23"),
        (2034.456, "XAUUSD", "2034.46"),
        (1.0912345, "EURUSD", "1.09123"),
        (0.612345, "XRPUSD", "0.612"),
        (None, "EURUSD", "-"),
    ],
)
def test_format_price(value, symbol, expected):
    assert format_price(value, symbol) == expected


@pytest.mark.parametrize(
    "error, needle",
    [
        (TooOldError(100, 10), "too old"),
        (StaleDataError(100, 10), "delayed"),
        (InsufficientDataError("signal", 50, 3), "Not enough candles"),
        (NoDataError(), "No market data"),
        (DataFeedError("BTCUSDT", "1h", "timeout"), "Could not fetch"),
        (RuntimeError("boom"), "Something went wrong"),
    ],
)
def test_format_error(error, needle):
    assert needle in format_error(error)
    assert format_error(error, "ar")


def test_help_mentions_examples():
    assert "BTCUSDT 1h" in format_help()
    assert "ذهب" in format_help("ar")
