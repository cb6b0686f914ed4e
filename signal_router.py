# signal_router.py
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from shared.models import SignalResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignalDelivery:
    """Готовый ответ пользователю: кому, на каком языке, что."""
    to: str
    lang: str
    text: str
    result: Optional[SignalResult] = None


@dataclass
class SignalRouter:
    """
    Централизованный маршрутизатор ответов.
    Каждая доставка проходит через все подключённые обработчики.
    """
    handlers: List[Callable[[SignalDelivery], None]]

    def route(self, delivery: SignalDelivery) -> None:
        for handler in self.handlers:
            try:
                handler(delivery)
            except Exception:
                logger.exception("❌ Ошибка в обработчике %s", getattr(handler, "__name__", handler))
