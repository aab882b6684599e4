"""Settings tests."""

import pytest
from pydantic import ValidationError

from wsrelay.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("TZ", raising=False)
    monkeypatch.delenv("WSRELAY_TIMEZONE", raising=False)
    s = Settings()
    assert s.http_port == 3000
    assert s.ws_port == 9999
    assert s.timezone == "Asia/Shanghai"


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("WSRELAY_HTTP_PORT", "8080")
    monkeypatch.setenv("WSRELAY_LOG_LEVEL", "debug")
    s = Settings()
    assert s.http_port == 8080
    assert s.log_level == "DEBUG"


def test_timezone_from_plain_tz(monkeypatch):
    monkeypatch.delenv("WSRELAY_TIMEZONE", raising=False)
    monkeypatch.setenv("TZ", "Europe/Paris")
    assert Settings().timezone == "Europe/Paris"


def test_prefixed_timezone_wins(monkeypatch):
    monkeypatch.setenv("TZ", "Europe/Paris")
    monkeypatch.setenv("WSRELAY_TIMEZONE", "Asia/Tokyo")
    assert Settings().timezone == "Asia/Tokyo"


@pytest.mark.parametrize("port", [0, 70000])
def test_port_range(port):
    with pytest.raises(ValidationError):
        Settings(http_port=port)


def test_outbox_must_hold_a_frame():
    with pytest.raises(ValidationError):
        Settings(outbox_size=0)
