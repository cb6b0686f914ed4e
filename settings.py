# settings.py
import logging
import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from engine.classifier import DEFAULT_RULE, DecisionRule
from engine.levels import DEFAULT_RISK_TABLE, RiskTable
from market_data.normalizer import DEFAULT_FRESHNESS, FreshnessPolicy

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


@dataclass
class Config:
    exchange_id: str = "binance"
    tz: str = "UTC"
    candle_limit: int = 150

    wa_token: str = ""
    wa_phone_number_id: str = ""
    wa_version: str = "v21.0"
    verify_token: str = ""

    fcs_api_key: str = ""
    fmp_api_key: str = ""

    log_level: str = "INFO"

    freshness: FreshnessPolicy = DEFAULT_FRESHNESS
    risk_table: RiskTable = DEFAULT_RISK_TABLE
    rule: DecisionRule = DEFAULT_RULE
    default_timeframe: str = "1h"


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def validate_tz(tz: str) -> str:
    """Имя IANA-зоны для отображения времени; ошибка конфигурации -> ValueError."""
    if tz.upper() == "UTC":
        return "UTC"
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"TZ={tz!r} is not a valid IANA timezone") from e
    return tz


def load_config() -> Config:
    load_dotenv()

    freshness = FreshnessPolicy(
        stale_multiplier=float(_env("STALE_MULTIPLIER", "3")),
        too_old_multiplier=float(_env("TOO_OLD_MULTIPLIER", "10")),
        stale_floor_seconds=int(_env("STALE_FLOOR_SECONDS", "300")),
    )

    risk_override = _env("RISK_MULTIPLIERS")
    risk_table = RiskTable.from_string(risk_override) if risk_override else DEFAULT_RISK_TABLE

    return Config(
        exchange_id=_env("EXCHANGE_ID", "binance"),
        tz=validate_tz(_env("TZ", "UTC")),
        candle_limit=int(_env("CANDLE_LIMIT", "150")),
        wa_token=_env("WHATSAPP_TOKEN"),
        wa_phone_number_id=_env("WHATSAPP_PHONE_NUMBER_ID"),
        wa_version=_env("WHATSAPP_VERSION", "v21.0"),
        verify_token=_env("VERIFY_TOKEN"),
        fcs_api_key=_env("FCS_API_KEY"),
        fmp_api_key=_env("FMP_API_KEY"),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        freshness=freshness,
        risk_table=risk_table,
        default_timeframe=_env("DEFAULT_TIMEFRAME", "1h"),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
