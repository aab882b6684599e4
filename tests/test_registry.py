"""Connection registry tests — membership, idempotence, concurrency."""

import random
import threading

import pytest

from wsrelay.realtime.connection import Connection, ConnectionState, DeliveryError
from wsrelay.realtime.registry import ConnectionRegistry, RegistryClosedError


def _conn(**kwargs) -> Connection:
    return Connection(transport=None, **kwargs)


def test_register_and_deregister():
    registry = ConnectionRegistry()
    a, b = _conn(), _conn()

    registry.register(a)
    registry.register(b)
    assert registry.size() == 2
    assert a in registry

    assert registry.deregister(a) is True
    assert registry.size() == 1
    assert a not in registry
    assert b in registry


def test_deregister_twice_is_noop():
    registry = ConnectionRegistry()
    a = _conn()
    registry.register(a)

    assert registry.deregister(a) is True
    assert registry.deregister(a) is False
    assert registry.size() == 0


def test_duplicate_identity_registered_once():
    registry = ConnectionRegistry()
    a = _conn(connection_id="same")
    registry.register(a)
    registry.register(a)
    registry.register(_conn(connection_id="same"))
    assert registry.size() == 1
    assert registry.snapshot() == (a,)


def test_deregistered_connection_rejects_delivery():
    registry = ConnectionRegistry()
    a = _conn()
    registry.register(a)
    a.send("before")

    registry.deregister(a)
    assert a.state is ConnectionState.CLOSED
    with pytest.raises(DeliveryError):
        a.send("after")


def test_snapshot_is_isolated_from_later_mutation():
    registry = ConnectionRegistry()
    a, b = _conn(), _conn()
    registry.register(a)
    registry.register(b)

    snapshot = registry.snapshot()
    registry.deregister(a)
    registry.register(_conn())

    assert set(snapshot) == {a, b}
    assert registry.size() == 2


def test_for_each_visits_every_member():
    registry = ConnectionRegistry()
    members = [_conn() for _ in range(5)]
    for c in members:
        registry.register(c)

    seen = []
    count = registry.for_each(seen.append)
    assert count == 5
    assert set(seen) == set(members)


def test_mutation_during_for_each_is_safe():
    registry = ConnectionRegistry()
    members = [_conn() for _ in range(10)]
    for c in members:
        registry.register(c)

    # Visitor deregisters everything while iterating
    count = registry.for_each(registry.deregister)
    assert count == 10
    assert registry.size() == 0


def test_closed_registry_refuses_new_connections():
    registry = ConnectionRegistry()
    a = _conn()
    registry.register(a)

    remaining = registry.close()
    assert remaining == (a,)
    assert registry.closed
    with pytest.raises(RegistryClosedError):
        registry.register(_conn())

    # Existing members can still leave
    assert registry.deregister(a) is True


def test_concurrent_register_deregister_keeps_count_exact():
    """Size always equals the number of connections currently open."""
    registry = ConnectionRegistry()
    per_thread = 200
    threads = 8
    survivors: list[list[Connection]] = [[] for _ in range(threads)]
    snapshots_ok = []

    def worker(idx: int):
        rng = random.Random(idx)
        opened = []
        for _ in range(per_thread):
            c = _conn()
            registry.register(c)
            opened.append(c)
            if rng.random() < 0.6:
                victim = opened.pop(rng.randrange(len(opened)))
                registry.deregister(victim)
                registry.deregister(victim)
        survivors[idx] = opened

    def reader():
        for _ in range(500):
            snap = registry.snapshot()
            snapshots_ok.append(len(snap) == len(set(c.id for c in snap)))

    pool = [threading.Thread(target=worker, args=(i,)) for i in range(threads)]
    pool.append(threading.Thread(target=reader))
    for t in pool:
        t.start()
    for t in pool:
        t.join()

    expected = {c.id for group in survivors for c in group}
    assert registry.size() == len(expected)
    assert {c.id for c in registry.snapshot()} == expected
    assert all(snapshots_ok)
