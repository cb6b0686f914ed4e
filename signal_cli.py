# signal_cli.py
import argparse
import json
import logging
import sys

from engine.assembler import build_signal
from market_data.feed import fetch_candles, make_exchange
from models import SignalEngineError
from settings import configure_logging, load_config
from signal_formatter import format_error, format_signal
from utils.timeframes import parse_timeframe

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Compute a trading signal for one symbol/timeframe")
    parser.add_argument("symbol", help="e.g. BTCUSDT")
    parser.add_argument("timeframe", nargs="?", default=None, help="1m 5m 15m 30m 1h 4h 1d")
    parser.add_argument("--lang", choices=("en", "ar"), default="en")
    parser.add_argument("--json", action="store_true", help="print the raw SignalResult")
    parser.add_argument("--strict", action="store_true", help="fail on stale data instead of warning")
    args = parser.parse_args(argv)

    try:
        cfg = load_config()
    except ValueError as e:
        parser.error(str(e))
    configure_logging(cfg.log_level)

    symbol = args.symbol.strip().upper()
    try:
        timeframe = parse_timeframe(args.timeframe or cfg.default_timeframe)
    except ValueError as e:
        parser.error(str(e))

    exchange = make_exchange(cfg.exchange_id)
    try:
        raw = fetch_candles(
            exchange,
            symbol,
            timeframe,
            limit=cfg.candle_limit,
            fcs_api_key=cfg.fcs_api_key,
            fmp_api_key=cfg.fmp_api_key,
        )
        result = build_signal(
            symbol,
            raw,
            timeframe,
            policy=cfg.freshness,
            strict_freshness=args.strict,
            rule=cfg.rule,
            risk_table=cfg.risk_table,
        )
    except SignalEngineError as e:
        logger.error("❌ %s %s: %s", symbol, timeframe, e)
        print(format_error(e, args.lang))
        return 1

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
    else:
        print(format_signal(result, lang=args.lang, tz=cfg.tz))
    return 0


if __name__ == "__main__":
    sys.exit(main())
