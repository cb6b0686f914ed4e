# market_data/feed.py
import logging
import time
from typing import Any, Dict, List, Optional

import ccxt
import requests

from models import DataFeedError, RawBar
from utils.timeframes import Timeframe, parse_timeframe, tf_seconds

from .adapters import adapt, to_epoch_seconds

logger = logging.getLogger(__name__)

QUOTES = ("USDT", "USDC", "USD", "BTC", "EUR")


def make_exchange(exchange_id: str) -> ccxt.Exchange:
    exchange_class = getattr(ccxt, exchange_id)
    exchange = exchange_class(
        {
            "enableRateLimit": True,
            "options": {"defaultType": "spot"},
        }
    )
    return exchange


def to_exchange_symbol(symbol: str) -> str:
    """BTCUSDT -> BTC/USDT (формат ccxt)."""
    s = symbol.strip().upper().replace("-", "/")
    if "/" in s:
        return s
    for quote in QUOTES:
        if s.endswith(quote) and len(s) > len(quote):
            return f"{s[:-len(quote)]}/{quote}"
    return s


def fetch_raw_candles(
    exchange: ccxt.Exchange,
    symbol: str,
    timeframe: Timeframe,
    limit: int = 150,
    now: Optional[float] = None,
) -> List[List[Any]]:
    """
    Сырые строки ccxt [t_open_ms, o, h, l, c, v] только по закрытым свечам.
    Последняя, ещё формирующаяся свеча отбрасывается.
    """
    timeframe = parse_timeframe(timeframe)
    market = to_exchange_symbol(symbol)
    try:
        raw = exchange.fetch_ohlcv(market, timeframe=timeframe.value, limit=limit + 1)
    except ccxt.RateLimitExceeded as e:
        logger.warning("⏳ Rate limit %s %s: %s", market, timeframe, e)
        raise DataFeedError(symbol, timeframe.value, "rate limit exceeded") from e
    except ccxt.BadSymbol as e:
        raise DataFeedError(symbol, timeframe.value, "unknown symbol") from e
    except ccxt.BaseError as e:
        logger.error("❌ Ошибка получения OHLCV %s %s: %s", market, timeframe, e)
        raise DataFeedError(symbol, timeframe.value, str(e)) from e

    if not raw:
        return []

    if now is None:
        now = time.time()
    bar_ms = tf_seconds(timeframe) * 1000
    now_ms = int(now * 1000)
    closed = [row for row in raw if int(row[0]) + bar_ms <= now_ms]
    return closed[-limit:]


# ==========================
# FX / METALS (FCS, FMP)
# ==========================

FMP_URL = "https://financialmodelingprep.com/api/v3/historical-chart/{interval}/{symbol}"
FCS_FOREX_URL = "https://fcsapi.com/api-v3/forex/candle"
HTTP_TIMEOUT = 10

FMP_INTERVALS = {
    Timeframe.M1: "1min",
    Timeframe.M5: "5min",
    Timeframe.M15: "15min",
    Timeframe.M30: "30min",
    Timeframe.H1: "1hour",
    Timeframe.H4: "4hour",
    Timeframe.D1: "1day",
}

FCS_PERIODS = {
    Timeframe.M1: "1m",
    Timeframe.M5: "5m",
    Timeframe.M15: "15m",
    Timeframe.M30: "30m",
    Timeframe.H1: "1h",
    Timeframe.H4: "4h",
    Timeframe.D1: "1d",
}


def is_crypto(symbol: str) -> bool:
    return symbol.strip().upper().endswith("USDT")


def to_fcs_symbol(symbol: str) -> str:
    """XAUUSD -> XAU/USD, USDJPY -> USD/JPY."""
    s = symbol.strip().upper()
    if "/" in s:
        return s
    if len(s) == 6:
        return f"{s[:3]}/{s[3:]}"
    if s.endswith("USD"):
        return f"{s[:-3]}/USD"
    return s


def _get_json(provider: str, url: str, params: Dict[str, Any], symbol: str, timeframe: Timeframe) -> Any:
    """GET с таймаутом. 404 -> None, остальные ошибки -> DataFeedError."""
    try:
        r = requests.get(url, params=params, timeout=HTTP_TIMEOUT)
        if r.status_code == 404:
            return None
        r.raise_for_status()
        return r.json()
    except requests.RequestException as e:
        logger.error("❌ %s HTTP ошибка %s %s: %s", provider, symbol, timeframe, e)
        raise DataFeedError(symbol, timeframe.value, f"{provider} HTTP error") from e
    except ValueError as e:
        raise DataFeedError(symbol, timeframe.value, f"{provider} returned invalid JSON") from e


def _closed_bars(bars: List[RawBar], timeframe: Timeframe, limit: int, now: float) -> List[RawBar]:
    """Только закрытые бары, по возрастанию времени, не больше limit."""
    bar_seconds = tf_seconds(timeframe)
    stamped = []
    for bar in bars:
        ts = to_epoch_seconds(bar.timestamp)
        if ts is not None and ts + bar_seconds <= now:
            stamped.append((ts, bar))
    stamped.sort(key=lambda item: item[0])
    return [bar for _, bar in stamped[-limit:]]


def fetch_fcs_candles(
    symbol: str,
    timeframe: Timeframe,
    api_key: str,
    limit: int = 150,
    now: Optional[float] = None,
) -> List[RawBar]:
    timeframe = parse_timeframe(timeframe)
    if now is None:
        now = time.time()
    lookback = tf_seconds(timeframe) * max(limit + 20, 240)
    params = {
        "symbol": to_fcs_symbol(symbol),
        "period": FCS_PERIODS[timeframe],
        "from": int(now) - lookback,
        "to": int(now),
        "access_key": api_key,
    }
    data = _get_json("FCS", FCS_FOREX_URL, params, symbol, timeframe)
    if not isinstance(data, dict):
        return []

    rows = data.get("response")
    if rows is None:
        rows = data.get("candles")
    if isinstance(rows, dict):
        rows = list(rows.values())
    if not isinstance(rows, list):
        logger.warning("⚠️ FCS %s %s: пустой ответ (%s)", symbol, timeframe, data.get("msg", ""))
        return []
    return _closed_bars(adapt(rows, "fcs"), timeframe, limit, now)


def fetch_fmp_candles(
    symbol: str,
    timeframe: Timeframe,
    api_key: str,
    limit: int = 150,
    now: Optional[float] = None,
) -> List[RawBar]:
    timeframe = parse_timeframe(timeframe)
    if now is None:
        now = time.time()
    url = FMP_URL.format(interval=FMP_INTERVALS[timeframe], symbol=symbol.strip().upper())
    data = _get_json("FMP", url, {"apikey": api_key}, symbol, timeframe)
    if not isinstance(data, list):
        if isinstance(data, dict) and data.get("Error Message"):
            raise DataFeedError(symbol, timeframe.value, f"FMP: {data['Error Message']}")
        return []
    return _closed_bars(adapt(data, "fmp"), timeframe, limit, now)


def fetch_candles(
    exchange: ccxt.Exchange,
    symbol: str,
    timeframe: Timeframe,
    limit: int = 150,
    now: Optional[float] = None,
    fcs_api_key: str = "",
    fmp_api_key: str = "",
) -> List[Any]:
    """
    Маршрутизация по типу инструмента:
      *USDT -> ccxt-биржа,
      FX и металлы -> FCS, при пустом ответе или ошибке -> FMP.
    """
    timeframe = parse_timeframe(timeframe)
    if is_crypto(symbol):
        return fetch_raw_candles(exchange, symbol, timeframe, limit=limit, now=now)

    providers = [
        ("FCS", fetch_fcs_candles, fcs_api_key),
        ("FMP", fetch_fmp_candles, fmp_api_key),
    ]
    providers = [p for p in providers if p[2]]
    if not providers:
        raise DataFeedError(symbol, timeframe.value, "no FX provider configured (FCS_API_KEY / FMP_API_KEY)")

    last_error: Optional[DataFeedError] = None
    for name, fetch, api_key in providers:
        try:
            bars = fetch(symbol, timeframe, api_key, limit=limit, now=now)
        except DataFeedError as e:
            logger.warning("⚠️ %s не ответил для %s %s: %s", name, symbol, timeframe, e.reason)
            last_error = e
            continue
        if bars:
            logger.info("OHLC %s %s: %d баров от %s", symbol, timeframe, len(bars), name)
            return bars

    if last_error is not None:
        raise last_error
    return []
