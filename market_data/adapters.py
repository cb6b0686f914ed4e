# market_data/adapters.py
"""
Адаптеры провайдеров: каждый превращает «родной» бар провайдера в RawBar.
Никакой проверки здесь нет, её делает нормализатор.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from models import RawBar

# Всё, что >= 1e10, считаем миллисекундами (1e10 сек = 2286 год)
MS_THRESHOLD = 10_000_000_000


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def _parse_iso(text: str) -> Optional[int]:
    text = text.strip()
    if not text:
        return None
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def to_epoch_seconds(value: Any) -> Optional[int]:
    """
    Секунды, миллисекунды или ISO-8601 -> epoch-секунды.
    Нераспознанное значение -> None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return int(dt.timestamp())

    if isinstance(value, str):
        stripped = value.strip()
        try:
            value = float(stripped)
        except ValueError:
            return _parse_iso(stripped)

    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None

    if abs(number) >= MS_THRESHOLD:
        return int(number // 1000)
    return int(number)


def from_ccxt_row(row: Sequence[Any]) -> RawBar:
    # ccxt: [t_open_ms, o, h, l, c, v]
    padded = list(row) + [None] * (5 - len(row))
    t_open_ms, o, h, l, c = padded[:5]
    return RawBar(timestamp=t_open_ms, open=o, high=h, low=l, close=c)


def from_fmp_row(row: Mapping[str, Any]) -> RawBar:
    # FMP historical-chart: {date, open, high, low, close, volume}
    return RawBar(
        timestamp=_first(row, "date", "datetime", "time"),
        open=row.get("open"),
        high=row.get("high"),
        low=row.get("low"),
        close=row.get("close"),
    )


def from_fcs_row(row: Mapping[str, Any]) -> RawBar:
    # FCS: {t | tm | timestamp | date, o, h, l, c}; t обычно в секундах
    return RawBar(
        timestamp=_first(row, "t", "tm", "timestamp", "date", "time", "datetime"),
        open=_first(row, "o", "open"),
        high=_first(row, "h", "high"),
        low=_first(row, "l", "low"),
        close=_first(row, "c", "close"),
    )


def from_mapping(row: Mapping[str, Any]) -> RawBar:
    return RawBar(
        timestamp=_first(row, "timestamp", "t", "time", "date", "datetime", "tm"),
        open=_first(row, "open", "o"),
        high=_first(row, "high", "h"),
        low=_first(row, "low", "l"),
        close=_first(row, "close", "c"),
    )


ADAPTERS: Dict[str, Callable[[Any], RawBar]] = {
    "ccxt": from_ccxt_row,
    "fmp": from_fmp_row,
    "fcs": from_fcs_row,
    "generic": from_mapping,
}


def to_raw_bar(row: Any) -> Optional[RawBar]:
    """Автоопределение формы бара."""
    if isinstance(row, RawBar):
        return row
    if isinstance(row, Mapping):
        return from_mapping(row)
    if isinstance(row, (list, tuple)):
        return from_ccxt_row(row)
    return None


def adapt(rows: Iterable[Any], provider: str = "generic") -> List[RawBar]:
    try:
        adapter = ADAPTERS[provider.lower()]
    except KeyError:
        raise ValueError(f"unknown provider: {provider!r}") from None
    return [adapter(row) for row in rows]
