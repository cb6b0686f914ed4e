# handlers/whatsapp_handler.py
from notifier import send_whatsapp_message
from settings import Config
from signal_router import SignalDelivery


def make_whatsapp_handler(cfg: Config):
    def handler(delivery: SignalDelivery):
        send_whatsapp_message(cfg, delivery.to, delivery.text)
    return handler
