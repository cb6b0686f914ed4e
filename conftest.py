import pytest

NOW = 1_700_006_400  # фиксированные "часы" для тестов
HOUR = 3600


def zigzag_rows(
    n: int = 200,
    start: float = 30000.0,
    up: float = 30.0,
    down: float = -20.0,
    step: int = HOUR,
    last_ts: int = NOW - HOUR,
):
    """
    ccxt-строки [t_ms, o, h, l, c, v]: нечётные бары двигаются на `up`,
    чётные на `down`. Open = предыдущий close, тени по 5 пунктов.
    """
    rows = []
    close = start
    first_ts = last_ts - (n - 1) * step
    for i in range(n):
        prev = close
        if i > 0:
            close = prev + (up if i % 2 == 1 else down)
        o = prev
        h = max(o, close) + 5.0
        l = min(o, close) - 5.0
        rows.append([(first_ts + i * step) * 1000, o, h, l, close, 1.0])
    return rows


def flat_rows(n: int = 80, price: float = 100.0, step: int = HOUR, last_ts: int = NOW - HOUR):
    first_ts = last_ts - (n - 1) * step
    return [[(first_ts + i * step) * 1000, price, price, price, price, 0.0] for i in range(n)]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def uptrend_rows():
    return zigzag_rows()


@pytest.fixture
def downtrend_rows():
    return zigzag_rows(up=-30.0, down=20.0)
