# engine/levels.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Union

from models import Decision, TradeLevels, ZeroVolatilityError
from utils.timeframes import Timeframe, parse_timeframe

DEFAULT_RISK_MULTIPLIERS: Dict[Timeframe, float] = {
    Timeframe.M1: 0.35,
    Timeframe.M5: 0.5,
    Timeframe.M15: 0.75,
    Timeframe.M30: 0.9,
    Timeframe.H1: 1.0,
    Timeframe.H4: 1.5,
    Timeframe.D1: 2.0,
}


@dataclass(frozen=True)
class RiskTable:
    """
    Множитель ATR для каждого таймфрейма.
    Таблица обязана покрывать весь Timeframe, как и пороги свежести.
    """
    multipliers: Mapping[Timeframe, float] = field(default_factory=lambda: dict(DEFAULT_RISK_MULTIPLIERS))

    def __post_init__(self):
        normalized = {parse_timeframe(tf): float(k) for tf, k in self.multipliers.items()}
        missing = [tf.value for tf in Timeframe if tf not in normalized]
        if missing:
            raise ValueError(f"risk table has no multiplier for: {', '.join(missing)}")
        bad = [tf.value for tf, k in normalized.items() if k <= 0]
        if bad:
            raise ValueError(f"risk multiplier must be > 0 for: {', '.join(bad)}")
        object.__setattr__(self, "multipliers", normalized)

    def __getitem__(self, timeframe: Union[Timeframe, str]) -> float:
        return self.multipliers[parse_timeframe(timeframe)]

    @classmethod
    def from_string(cls, text: str) -> "RiskTable":
        """
        "1m:0.35,5m:0.5": переопределяет только указанные таймфреймы,
        остальные берутся из DEFAULT_RISK_MULTIPLIERS.
        """
        multipliers = dict(DEFAULT_RISK_MULTIPLIERS)
        for item in (text or "").split(","):
            item = item.strip()
            if not item:
                continue
            tf, sep, value = item.partition(":")
            if not sep:
                raise ValueError(f"bad risk multiplier entry: {item!r}")
            multipliers[parse_timeframe(tf)] = float(value)
        return cls(multipliers)


DEFAULT_RISK_TABLE = RiskTable()


def compute_levels(
    decision: Decision,
    entry_close: float,
    atr: float,
    timeframe: Union[Timeframe, str],
    risk_table: Optional[RiskTable] = None,
) -> Optional[TradeLevels]:
    """
    Уровни от ATR:
      BUY:  sl = entry - R, tp1 = entry + R, tp2 = entry + 2R
      SELL: зеркально
    где R = multiplier(timeframe) * ATR. Для NEUTRAL None.
    """
    if decision == Decision.NEUTRAL:
        return None

    if atr <= 0:
        raise ZeroVolatilityError(atr)

    table = risk_table or DEFAULT_RISK_TABLE
    risk = table[timeframe] * atr
    entry = entry_close

    if decision == Decision.BUY:
        return TradeLevels(entry=entry, sl=entry - risk, tp1=entry + risk, tp2=entry + 2 * risk)
    return TradeLevels(entry=entry, sl=entry + risk, tp1=entry - risk, tp2=entry - 2 * risk)
