"""Message submission endpoint tests."""

import pytest

from wsrelay.realtime.connection import Connection


@pytest.mark.asyncio
async def test_send_with_no_subscribers(client):
    resp = await client.post("/api/sendmsg", json={"x": 1})
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["clientCount"] == 0
    assert data["timestamp"].endswith("Z")
    assert data["timezone"] == "Asia/Shanghai"
    assert "localTime" in data


@pytest.mark.asyncio
async def test_send_counts_attempted_deliveries(client, hub):
    subscribers = [Connection(None) for _ in range(3)]
    for conn in subscribers:
        hub.registry.register(conn)

    resp = await client.post("/api/sendmsg", json={"msg": "hi"})
    assert resp.status_code == 200
    assert resp.json()["clientCount"] == 3
    for conn in subscribers:
        assert conn.outbox.qsize() == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"", b"   ", b"null", b"{}", b"[]", b'""'])
async def test_empty_body_rejected(client, hub, body):
    conn = Connection(None)
    hub.registry.register(conn)

    resp = await client.post(
        "/api/sendmsg", content=body, headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert "empty" in resp.json()["detail"]
    assert conn.outbox.empty()


@pytest.mark.asyncio
async def test_malformed_json_rejected(client):
    resp = await client.post(
        "/api/sendmsg", content=b"{oops", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert "valid JSON" in resp.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [0, False, "text", [1], {"nested": {"a": [1, 2]}}])
async def test_any_non_empty_json_is_relayed(client, hub, payload):
    conn = Connection(None)
    hub.registry.register(conn)

    resp = await client.post("/api/sendmsg", json=payload)
    assert resp.status_code == 200
    assert conn.outbox.qsize() == 1


@pytest.mark.asyncio
async def test_internal_failure_returns_500(client, hub, monkeypatch):
    def broken(payload):
        raise RuntimeError("registry on fire")

    monkeypatch.setattr(hub, "broadcast", broken)

    resp = await client.post("/api/sendmsg", json={"msg": "hi"})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Internal server error"


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    resp = await client.post(
        "/api/sendmsg", json={"msg": "hi"}, headers={"X-Request-ID": "trace-123"}
    )
    assert resp.headers["X-Request-ID"] == "trace-123"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    r1 = await client.post("/api/sendmsg", json={"msg": "a"})
    r2 = await client.post("/api/sendmsg", json={"msg": "b"})
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]
