# signal_formatter.py
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from models import (
    DataFeedError,
    Decision,
    InsufficientDataError,
    NoDataError,
    StaleDataError,
    TooOldError,
)
from shared.models import SignalResult

FX_MAJORS = {"EURUSD", "GBPUSD", "USDJPY", "USDCHF", "USDCAD", "AUDUSD", "NZDUSD"}

DECISION_AR = {
    Decision.BUY: "شراء",
    Decision.SELL: "بيع",
    Decision.NEUTRAL: "محايد",
}


def format_price(value: Optional[float], symbol: str) -> str:
    if value is None:
        return "-"
    upper = symbol.upper()
    if upper.endswith("USDT") or abs(value) >= 10:
        return f"{value:.2f}"
    if upper in FX_MAJORS:
        return f"{value:.5f}"
    return f"{value:.3f}"


def _time_label(iso: str, tz: str) -> str:
    dt = datetime.strptime(iso, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc)
    if tz and tz.upper() != "UTC":
        dt = dt.astimezone(ZoneInfo(tz))
    return dt.strftime("%Y-%m-%d %H:%M")


def _stale_warning(age_seconds: int, lang: str) -> str:
    minutes = max(0, round(age_seconds / 60))
    if lang == "ar":
        return f"⚠️ تنبيه: البيانات متأخرة ~{minutes} دقيقة"
    return f"⚠️ Warning: data is delayed by ~{minutes} minutes"


def format_signal(result: SignalResult, lang: str = "en", tz: str = "UTC") -> str:
    """
    Текстовый блок для WhatsApp (без HTML) на арабском или английском.
    """
    ar = lang == "ar"

    if result.status == "unusable":
        if ar:
            return f"⛔ بيانات {result.symbol} ({result.timeframe}) قديمة جداً ولا يمكن الاعتماد عليها حالياً."
        return f"⛔ {result.symbol} ({result.timeframe}) data is too old to use right now."

    if result.is_stale and result.decision == Decision.NEUTRAL:
        if ar:
            return "مافي إشارة واضحة حالياً (البيانات متأخرة)."
        return "No clear signal right now (data is delayed)."

    tz_name = tz if tz and tz.upper() != "UTC" else "UTC"
    time_label = _time_label(result.last_candle_time_utc, tz)

    if result.decision == Decision.BUY:
        icon = "🟢"
    elif result.decision == Decision.SELL:
        icon = "🔴"
    else:
        icon = "⚪"

    lines = []
    if result.is_stale:
        lines.append(_stale_warning(result.age_seconds, lang))

    if ar:
        lines.append(f"الوقت ({tz_name}): {time_label}")
        lines.append(f"الرمز: {result.symbol}")
        lines.append(f"الإطار الزمني: {result.timeframe}")
        lines.append(f"{icon} الإشارة: {DECISION_AR[result.decision]} ({result.decision})")
    else:
        lines.append(f"time ({tz_name}): {time_label}")
        lines.append(f"symbol: {result.symbol}")
        lines.append(f"timeframe: {result.timeframe}")
        lines.append(f"{icon} SIGNAL: {result.decision}")

    if result.decision != Decision.NEUTRAL:
        labels = ("الدخول", "وقف الخسارة", "الهدف 1", "الهدف 2") if ar else ("Entry", "SL", "TP1", "TP2")
        for label, value in zip(labels, result.levels):
            lines.append(f"{label}: {format_price(value, result.symbol)}")

    return "\n".join(lines)


def format_error(error: Exception, lang: str = "en") -> str:
    ar = lang == "ar"
    if isinstance(error, TooOldError):
        return "⛔ البيانات قديمة جداً ولا يمكن استخدامها." if ar else "⛔ Market data is too old to use."
    if isinstance(error, StaleDataError):
        return "⚠️ البيانات متأخرة حالياً." if ar else "⚠️ Market data is delayed right now."
    if isinstance(error, InsufficientDataError):
        return (
            "⚠️ لا توجد شموع كافية لحساب الإشارة."
            if ar
            else "⚠️ Not enough candles to compute a signal."
        )
    if isinstance(error, NoDataError):
        return "⚠️ لا توجد بيانات لهذا الرمز." if ar else "⚠️ No market data for this symbol."
    if isinstance(error, DataFeedError):
        return "❌ تعذر جلب الأسعار، حاول لاحقاً." if ar else "❌ Could not fetch prices, try again later."
    return "❌ حدث خطأ غير متوقع." if ar else "❌ Something went wrong."


def format_help(lang: str = "en") -> str:
    if lang == "ar":
        return (
            "أرسل اسم الرمز والإطار الزمني، مثال:\n"
            "ذهب 15 دقيقة\n"
            "بيتكوين ساعة"
        )
    return (
        "Send a symbol and a timeframe, for example:\n"
        "XAUUSD 15m\n"
        "BTCUSDT 1h"
    )
