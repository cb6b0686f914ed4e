from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from models import Decision, IndicatorSnapshot
from utils.timeframes import Timeframe


# ==========================
# SIGNAL RESULT
# ==========================

class SignalResult(BaseModel):
    """
    Результат одного запроса сигнала. Создаётся один раз,
    сразу форматируется вызывающим кодом и больше не меняется.
    """
    model_config = ConfigDict(frozen=True)

    symbol: str
    timeframe: Timeframe
    status: Literal["ok", "unusable"] = "ok"
    decision: Optional[Decision] = None

    entry: Optional[float] = None
    stop_loss: Optional[float] = None
    take_profit_1: Optional[float] = None
    take_profit_2: Optional[float] = None

    close: Optional[float] = None
    last_candle_time_utc: str
    age_seconds: int
    is_stale: bool
    too_old: bool = False

    indicators: Optional[IndicatorSnapshot] = None

    @property
    def levels(self) -> List[Optional[float]]:
        return [self.entry, self.stop_loss, self.take_profit_1, self.take_profit_2]

    @property
    def has_levels(self) -> bool:
        return all(v is not None for v in self.levels)

    @model_validator(mode="after")
    def _check_levels(self) -> "SignalResult":
        has_any = any(v is not None for v in self.levels)

        if self.status == "unusable":
            if self.decision is not None or has_any:
                raise ValueError("unusable result must not carry a decision or levels")
            return self

        if self.decision is None:
            raise ValueError("ok result requires a decision")
        if self.decision == Decision.NEUTRAL and has_any:
            raise ValueError("NEUTRAL result must not carry levels")
        if self.decision != Decision.NEUTRAL and not self.has_levels:
            raise ValueError(f"{self.decision} result requires entry/stop_loss/take_profit_1/take_profit_2")
        return self


# ==========================
# API RESPONSE MODELS
# ==========================

class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    detail: Optional[str] = None


class WebhookAck(BaseModel):
    ok: bool = True
    processed: int = 0
    duplicates: int = 0


class HealthResponse(BaseModel):
    ok: bool = True
    exchange: str
    timeframes: List[str]
