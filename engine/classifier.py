# engine/classifier.py
from dataclasses import dataclass
from typing import Optional

from models import Decision, IndicatorSnapshot


@dataclass(frozen=True)
class DecisionRule:
    """
    Калибровочные константы правила BUY/SELL.
      BUY:  close > ema50, ema20 > ema50, |rsi - buy_rsi_pivot| > buy_rsi_min_distance, macd > signal
      SELL: close < ema50, ema20 < ema50, rsi <= sell_rsi_max, macd < signal
    """
    buy_rsi_pivot: float = 55.0
    buy_rsi_min_distance: float = 1.0
    sell_rsi_max: float = 45.0


DEFAULT_RULE = DecisionRule()


def is_buy(close, ema20, ema50, rsi, macd_line, macd_signal, rule: DecisionRule = DEFAULT_RULE) -> bool:
    return (
        close > ema50
        and ema20 > ema50
        and abs(rsi - rule.buy_rsi_pivot) > rule.buy_rsi_min_distance
        and macd_line > macd_signal
    )


def is_sell(close, ema20, ema50, rsi, macd_line, macd_signal, rule: DecisionRule = DEFAULT_RULE) -> bool:
    return (
        close < ema50
        and ema20 < ema50
        and rsi <= rule.sell_rsi_max
        and macd_line < macd_signal
    )


def classify(
    close: float,
    ema20: float,
    ema50: float,
    rsi: float,
    macd_line: float,
    macd_signal: float,
    rule: Optional[DecisionRule] = None,
) -> Decision:
    rule = rule or DEFAULT_RULE
    if is_buy(close, ema20, ema50, rsi, macd_line, macd_signal, rule):
        return Decision.BUY
    if is_sell(close, ema20, ema50, rsi, macd_line, macd_signal, rule):
        return Decision.SELL
    return Decision.NEUTRAL


def classify_snapshot(close: float, snapshot: IndicatorSnapshot, rule: Optional[DecisionRule] = None) -> Decision:
    return classify(
        close,
        snapshot.ema20,
        snapshot.ema50,
        snapshot.rsi14,
        snapshot.macd_line,
        snapshot.macd_signal,
        rule=rule,
    )
