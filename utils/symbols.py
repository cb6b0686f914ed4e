# utils/symbols.py
import re
import unicodedata
from typing import Dict, List, Optional, Tuple

from .timeframes import Timeframe

ARABIC_DIGITS = str.maketrans("٠١٢٣٤٥٦٧٨٩", "0123456789")
ARABIC_MARKS = re.compile(r"[ً-ْـ]")
ARABIC_LETTERS = re.compile(r"[؀-ۿ]")

SYMBOL_ALIASES: List[Tuple[str, List[str]]] = [
    ("BTCUSDT", ["btc", "btcusdt", "btc/usdt", "bitcoin", "بيتكوين", "بتكوين"]),
    ("ETHUSDT", ["eth", "ethusdt", "eth/usdt", "ethereum", "إيثيريوم", "ايثيريوم", "اثيريوم"]),
    ("XAUUSD", ["xauusd", "xau", "gold", "ذهب", "الذهب", "دهب"]),
    ("XAGUSD", ["xagusd", "xag", "silver", "فضة", "الفضة", "فضه"]),
    ("EURUSD", ["eurusd", "eur/usd", "eur", "يورو"]),
    ("GBPUSD", ["gbpusd", "gbp/usd", "gbp", "استرليني", "جنيه"]),
    ("USDJPY", ["usdjpy", "usd/jpy", "jpy", "ين"]),
    ("USDCHF", ["usdchf", "usd/chf", "chf", "فرنك"]),
    ("USDCAD", ["usdcad", "usd/cad", "cad", "كندي"]),
    ("AUDUSD", ["audusd", "aud/usd", "aud", "استرالي", "أسترالي"]),
]

ALIAS_MAP: Dict[str, str] = {
    alias.lower(): canonical
    for canonical, aliases in SYMBOL_ALIASES
    for alias in aliases + [canonical]
}

MINUTE_WORDS = r"(m|mins?|minutes?|دقيقة|دقيقه|دقائق|دقايق)"
HOUR_WORDS = r"(h|hrs?|hours?|ساعة|ساعه|ساعات)"

# Порядок важен: 15m проверяется раньше 5m и 1m, 4h раньше 1h.
# Голое "دقيقة" без числа перед ним значит 1m.
TIMEFRAME_PATTERNS: List[Tuple[Timeframe, re.Pattern]] = [
    (Timeframe.M15, re.compile(rf"(\b15\s*{MINUTE_WORDS}\b|ربع ساعة)")),
    (Timeframe.M30, re.compile(rf"(\b30\s*{MINUTE_WORDS}\b|نص ساعة|نصف ساعة)")),
    (Timeframe.M5, re.compile(rf"(\b5\s*{MINUTE_WORDS}\b|خمس دقائق)")),
    (Timeframe.M1, re.compile(rf"(\b1\s*{MINUTE_WORDS}\b|(^|[^\d\s])\s*دقيقة)")),
    (Timeframe.H4, re.compile(rf"(\b4\s*{HOUR_WORDS}\b|اربع ساعات|أربع ساعات)")),
    (Timeframe.H1, re.compile(rf"(\b1\s*{HOUR_WORDS}\b|hourly|ساعة|ساعه)")),
    (Timeframe.D1, re.compile(r"(\b1\s*(d|days?)\b|\bdaily\b|\bday\b|يومي)")),
]


def normalize_text(text: str) -> str:
    text = unicodedata.normalize("NFKC", text or "").translate(ARABIC_DIGITS)
    text = ARABIC_MARKS.sub("", text)
    return re.sub(r"\s+", " ", text).strip().lower()


def detect_language(text: str) -> str:
    return "ar" if ARABIC_LETTERS.search(text or "") else "en"


def resolve_symbol(text: str) -> Optional[str]:
    """
    Ищет тикер в свободном тексте: сначала по алиасам
    (английским и арабским), затем по шаблону XXXUSD/XXXUSDT.
    """
    normalized = normalize_text(text)
    if not normalized:
        return None

    if normalized in ALIAS_MAP:
        return ALIAS_MAP[normalized]

    for token in re.split(r"[\s,،؟?!.]+", normalized):
        if token in ALIAS_MAP:
            return ALIAS_MAP[token]
        if token.startswith("ال") and token[2:] in ALIAS_MAP:
            return ALIAS_MAP[token[2:]]

    match = re.search(r"\b([a-z]{3,6}(?:usdt|usd))\b", normalized.replace("/", ""))
    if match:
        return match.group(1).upper()
    return None


def timeframe_from_text(text: str, default: Timeframe = Timeframe.H1) -> Timeframe:
    normalized = normalize_text(text)
    for timeframe, pattern in TIMEFRAME_PATTERNS:
        if pattern.search(normalized):
            return timeframe
    return default
