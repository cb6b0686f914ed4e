# notifier.py
import logging

import requests

from settings import Config

logger = logging.getLogger(__name__)

GRAPH_API = "https://graph.facebook.com"


def send_whatsapp_message(cfg: Config, to: str, text: str) -> bool:
    """
    Отправка текстового сообщения через WhatsApp Cloud API.
    Возвращает True, если API принял сообщение.
    """
    if not cfg.wa_token or not cfg.wa_phone_number_id:
        logger.warning("⚠️ WHATSAPP_TOKEN или WHATSAPP_PHONE_NUMBER_ID пусты, пропускаю отправку")
        return False
    if not to:
        logger.warning("⚠️ Нет получателя, пропускаю отправку")
        return False

    try:
        r = requests.post(
            f"{GRAPH_API}/{cfg.wa_version}/{cfg.wa_phone_number_id}/messages",
            headers={"Authorization": f"Bearer {cfg.wa_token}"},
            json={
                "messaging_product": "whatsapp",
                "to": to,
                "type": "text",
                "text": {"body": text, "preview_url": False},
            },
            timeout=10,
        )
        r.raise_for_status()
    except requests.RequestException as e:
        logger.error("❌ Ошибка отправки в WhatsApp: %s", e)
        return False
    return True
