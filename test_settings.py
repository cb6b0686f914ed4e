import pytest

from engine.levels import DEFAULT_RISK_TABLE
from settings import load_config, validate_tz


@pytest.mark.parametrize("tz", ["UTC", "utc", "Asia/Riyadh", "Europe/Moscow"])
def test_valid_timezones(tz):
    assert validate_tz(tz) in (tz, "UTC")


@pytest.mark.parametrize("tz", ["Mars/Olympus", "Asia/Riyad", "../etc/passwd"])
def test_invalid_timezone_is_rejected(tz):
    with pytest.raises(ValueError, match="TZ"):
        validate_tz(tz)


def test_load_config_rejects_bad_tz(monkeypatch):
    monkeypatch.setenv("TZ", "Mars/Olympus")
    with pytest.raises(ValueError):
        load_config()


def test_load_config_reads_provider_keys(monkeypatch):
    monkeypatch.setenv("TZ", "Asia/Riyadh")
    monkeypatch.setenv("FCS_API_KEY", " fcs-key ")
    monkeypatch.setenv("FMP_API_KEY", "fmp-key")
    monkeypatch.delenv("RISK_MULTIPLIERS", raising=False)

    cfg = load_config()

    assert cfg.tz == "Asia/Riyadh"
    assert cfg.fcs_api_key == "fcs-key"
    assert cfg.fmp_api_key == "fmp-key"
    assert cfg.risk_table == DEFAULT_RISK_TABLE
