# handlers/log_handler.py
import logging

from signal_router import SignalDelivery

logger = logging.getLogger(__name__)


def log_handler(delivery: SignalDelivery):
    result = delivery.result
    if result is None:
        logger.info("REPLY to=%s lang=%s (no signal)", delivery.to, delivery.lang)
        return
    logger.info(
        "REPLY to=%s %s %s status=%s decision=%s age=%ss stale=%s",
        delivery.to,
        result.symbol,
        result.timeframe,
        result.status,
        result.decision,
        result.age_seconds,
        result.is_stale,
    )
