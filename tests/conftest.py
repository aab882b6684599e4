"""Test fixtures — a fresh hub and app per test.

Learn: Nothing in the relay is global except the default app instance in
wsrelay.main, so each test builds its own RelayHub and hands it to
create_app(). HTTP routes are exercised through httpx's ASGITransport;
WebSocket flows need Starlette's TestClient, which runs the app on a
portal thread. Used as a context manager, the TestClient shares one event
loop between its HTTP requests and its websocket sessions, so a POST
can broadcast to sockets opened through the same client.
"""

import time
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from wsrelay.config import Settings
from wsrelay.main import create_app
from wsrelay.realtime.clock import Clock
from wsrelay.realtime.hub import RelayHub

T0 = datetime(2024, 1, 31, 12, 15, 0, tzinfo=timezone.utc)


class FakeNow:
    """Settable clock source."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


def wait_for(predicate, timeout: float = 2.0) -> bool:
    """Poll until predicate() is true. Server-side cleanup runs on another thread."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture()
def config():
    return Settings(
        timezone="Asia/Shanghai",
        http_port=3000,
        ws_port=9999,
        outbox_size=8,
        welcome_message="connected",
    )


@pytest.fixture()
def fake_now():
    return FakeNow()


@pytest.fixture()
def hub(config):
    return RelayHub(config)


@pytest.fixture()
def fixed_hub(config, fake_now):
    """Hub whose clock only moves when the test advances it."""
    return RelayHub(config, clock=Clock(config.timezone, now_fn=fake_now))


@pytest.fixture()
def app(hub):
    return create_app(hub)


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def ws_client(app):
    with TestClient(app) as tc:
        yield tc
