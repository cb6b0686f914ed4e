#web/backend/app/main.py
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from handlers.log_handler import log_handler
from handlers.whatsapp_handler import make_whatsapp_handler
from market_data.feed import make_exchange
from models import DataFeedError, InsufficientDataError, NoDataError, ZeroVolatilityError
from settings import Config, configure_logging, load_config
from shared.models import HealthResponse, SignalResult, WebhookAck
from signal_router import SignalRouter
from utils.timeframes import Timeframe, parse_timeframe

from .config import SERVICE_TITLE, SERVICE_VERSION
from .repository import SeenMessageStore
from .services import compute_signal, dedupe, extract_messages, handle_messages

logger = logging.getLogger(__name__)


# -----------------------------
# DEPENDENCIES
# -----------------------------
@lru_cache
def get_config() -> Config:
    cfg = load_config()
    configure_logging(cfg.log_level)
    return cfg


@lru_cache
def _exchange_for(exchange_id: str):
    return make_exchange(exchange_id)


def get_exchange(cfg: Config = Depends(get_config)):
    return _exchange_for(cfg.exchange_id)


def get_router(cfg: Config = Depends(get_config)) -> SignalRouter:
    return SignalRouter(handlers=[make_whatsapp_handler(cfg), log_handler])


_seen_store = SeenMessageStore()


def get_store() -> SeenMessageStore:
    return _seen_store


# -----------------------------
# APP
# -----------------------------
app = FastAPI(
    title=SERVICE_TITLE,
    version=SERVICE_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
def api_health(cfg: Config = Depends(get_config)):
    return HealthResponse(exchange=cfg.exchange_id, timeframes=[tf.value for tf in Timeframe])


@app.get("/signal", response_model=SignalResult)
def api_signal(
    symbol: str = Query(..., min_length=3),
    timeframe: str = Query(default="1h"),
    cfg: Config = Depends(get_config),
    exchange=Depends(get_exchange),
):
    try:
        tf = parse_timeframe(timeframe)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    symbol = symbol.strip().upper()
    try:
        return compute_signal(exchange, cfg, symbol, tf)
    except NoDataError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InsufficientDataError, ZeroVolatilityError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DataFeedError as e:
        raise HTTPException(status_code=502, detail=str(e))


@app.get("/webhook", response_class=PlainTextResponse)
def api_webhook_verify(
    mode: Optional[str] = Query(default=None, alias="hub.mode"),
    token: Optional[str] = Query(default=None, alias="hub.verify_token"),
    challenge: Optional[str] = Query(default=None, alias="hub.challenge"),
    cfg: Config = Depends(get_config),
):
    if mode == "subscribe" and cfg.verify_token and token == cfg.verify_token:
        return challenge or ""
    raise HTTPException(status_code=403, detail="verification failed")


@app.post("/webhook", response_model=WebhookAck)
async def api_webhook(
    request: Request,
    background: BackgroundTasks,
    cfg: Config = Depends(get_config),
    exchange=Depends(get_exchange),
    router: SignalRouter = Depends(get_router),
    store: SeenMessageStore = Depends(get_store),
):
    try:
        payload: Dict[str, Any] = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="invalid payload")

    messages = extract_messages(payload)
    fresh = dedupe(messages, store)
    if fresh:
        background.add_task(handle_messages, fresh, exchange, cfg, router)

    return WebhookAck(processed=len(fresh), duplicates=len(messages) - len(fresh))
