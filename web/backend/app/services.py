#web/backend/app/services.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from engine.assembler import build_signal
from market_data.feed import fetch_candles
from models import SignalEngineError
from settings import Config
from shared.models import SignalResult
from signal_formatter import format_error, format_help, format_signal
from signal_router import SignalDelivery, SignalRouter
from utils.symbols import detect_language, resolve_symbol, timeframe_from_text
from utils.timeframes import Timeframe, parse_timeframe

from .repository import SeenMessageStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InboundMessage:
    id: str
    sender: str
    text: str


# -----------------------------
# SIGNAL
# -----------------------------
def compute_signal(
    exchange,
    cfg: Config,
    symbol: str,
    timeframe: Timeframe,
    now: Optional[float] = None,
) -> SignalResult:
    raw = fetch_candles(
        exchange,
        symbol,
        timeframe,
        limit=cfg.candle_limit,
        now=now,
        fcs_api_key=cfg.fcs_api_key,
        fmp_api_key=cfg.fmp_api_key,
    )
    return build_signal(
        symbol,
        raw,
        timeframe,
        now=now,
        policy=cfg.freshness,
        rule=cfg.rule,
        risk_table=cfg.risk_table,
    )


# -----------------------------
# WEBHOOK PAYLOAD
# -----------------------------
def _message_text(message: Dict[str, Any]) -> str:
    kind = message.get("type")
    if kind == "text":
        return (message.get("text") or {}).get("body", "") or ""
    if kind == "interactive":
        interactive = message.get("interactive") or {}
        reply = interactive.get("button_reply") or interactive.get("list_reply") or {}
        return reply.get("title", "") or ""
    if kind == "button":
        return (message.get("button") or {}).get("text", "") or ""
    for media in ("image", "video", "document"):
        caption = (message.get(media) or {}).get("caption")
        if caption:
            return caption
    return ""


def extract_messages(payload: Dict[str, Any]) -> List[InboundMessage]:
    """
    Все входящие сообщения из webhook WhatsApp Cloud API
    (entry[].changes[].value.messages[]). Статусы доставки игнорируются.
    """
    out: List[InboundMessage] = []
    for entry in payload.get("entry") or []:
        for change in entry.get("changes") or []:
            value = change.get("value") or {}
            contacts = value.get("contacts") or []
            wa_id = contacts[0].get("wa_id", "") if contacts else ""
            for message in value.get("messages") or []:
                message_id = (message.get("id") or "").strip()
                if not message_id:
                    continue
                out.append(
                    InboundMessage(
                        id=message_id,
                        sender=(message.get("from") or wa_id or "").strip(),
                        text=_message_text(message).strip(),
                    )
                )
    return out


# -----------------------------
# REPLY
# -----------------------------
def build_reply(exchange, cfg: Config, message: InboundMessage, now: Optional[float] = None) -> SignalDelivery:
    lang = detect_language(message.text)
    symbol = resolve_symbol(message.text)
    if symbol is None:
        return SignalDelivery(to=message.sender, lang=lang, text=format_help(lang))

    timeframe = timeframe_from_text(message.text, default=parse_timeframe(cfg.default_timeframe))
    try:
        result = compute_signal(exchange, cfg, symbol, timeframe, now=now)
    except SignalEngineError as e:
        logger.warning("⚠️ %s %s: %s", symbol, timeframe, e)
        return SignalDelivery(to=message.sender, lang=lang, text=format_error(e, lang))

    return SignalDelivery(
        to=message.sender,
        lang=lang,
        text=format_signal(result, lang=lang, tz=cfg.tz),
        result=result,
    )


def handle_messages(
    messages: List[InboundMessage],
    exchange,
    cfg: Config,
    router: SignalRouter,
    now: Optional[float] = None,
) -> None:
    for message in messages:
        try:
            delivery = build_reply(exchange, cfg, message, now=now)
        except Exception:
            logger.exception("❌ Ошибка обработки сообщения %s", message.id)
            continue
        router.route(delivery)


def dedupe(messages: List[InboundMessage], store: SeenMessageStore) -> List[InboundMessage]:
    fresh = []
    for message in messages:
        if store.already_handled(message.id):
            logger.info("Duplicate message %s skipped", message.id)
            continue
        fresh.append(message)
    return fresh
