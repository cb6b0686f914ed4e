# models/errors.py


class SignalEngineError(Exception):
    """Базовая ошибка движка сигналов."""


class NoDataError(SignalEngineError):
    """После разбора ответа провайдера не осталось ни одной валидной свечи."""

    def __init__(self, message: str = "no valid candles"):
        super().__init__(message)


class InsufficientDataError(SignalEngineError):
    def __init__(self, what: str, required: int, available: int):
        self.what = what
        self.required = required
        self.available = available
        super().__init__(f"{what}: need {required} values, got {available}")


class StaleDataError(SignalEngineError):
    """
    Последняя свеча старше мягкого порога.
    Обычно это только флаг is_stale; исключение бросается лишь в строгом режиме.
    """

    def __init__(self, age_seconds: int, threshold: int):
        self.age_seconds = age_seconds
        self.threshold = threshold
        super().__init__(f"data is stale: age={age_seconds}s > {threshold}s")


class TooOldError(SignalEngineError):
    """Данные старше жёсткого потолка, по ним нельзя принимать решение."""

    def __init__(self, age_seconds: int, threshold: int):
        self.age_seconds = age_seconds
        self.threshold = threshold
        super().__init__(f"data is too old: age={age_seconds}s > {threshold}s")


class ZeroVolatilityError(SignalEngineError):
    def __init__(self, atr: float):
        self.atr = atr
        super().__init__(f"ATR={atr}: cannot size stop/targets")


class DataFeedError(SignalEngineError):
    """Ошибка получения свечей у биржи/провайдера."""

    def __init__(self, symbol: str, timeframe: str, reason: str):
        self.symbol = symbol
        self.timeframe = timeframe
        self.reason = reason
        super().__init__(f"{symbol} {timeframe}: {reason}")
