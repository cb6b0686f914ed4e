#web/backend/app/config.py

# WhatsApp может повторно доставить одно и то же сообщение
SEEN_MESSAGE_TTL_SECONDS = 3 * 60

SERVICE_TITLE = "Trading Signal Webhook"
SERVICE_VERSION = "1.0.0"
