"""Connection registry — the authoritative set of live subscribers.

Learn: This is the only shared mutable state in the relay. All access goes
through the methods below, guarded by one lock, so it stays correct
whether callers share an event loop or run on separate threads.

Broadcast never iterates the live dict. It asks for snapshot(), a tuple
copied under the lock, so a register/deregister racing with a broadcast
can't corrupt the iteration. Deregistration marks the connection CLOSED
under the same lock. After deregister() returns, send() on that
connection raises, so it can never be delivered to again.
"""

import threading
from typing import Callable

from wsrelay.realtime.connection import Connection


class RegistryClosedError(Exception):
    """The registry is shutting down and refuses new connections."""


class ConnectionRegistry:
    def __init__(self):
        self._connections: dict[str, Connection] = {}
        self._lock = threading.Lock()
        self._closed = False

    def register(self, connection: Connection) -> None:
        """Add a connection. Registering the same identity twice is a no-op."""
        with self._lock:
            if self._closed:
                raise RegistryClosedError("registry is closed to new connections")
            self._connections.setdefault(connection.id, connection)

    def deregister(self, connection: Connection) -> bool:
        """Remove a connection if present. Returns False if it was already gone."""
        with self._lock:
            removed = self._connections.pop(connection.id, None)
            connection.mark_closed()
        return removed is not None

    def snapshot(self) -> tuple[Connection, ...]:
        """Point-in-time copy of the live members."""
        with self._lock:
            return tuple(self._connections.values())

    def for_each(self, visitor: Callable[[Connection], None]) -> int:
        """Call `visitor` on every member of a snapshot. Returns the count."""
        members = self.snapshot()
        for connection in members:
            visitor(connection)
        return len(members)

    def size(self) -> int:
        with self._lock:
            return len(self._connections)

    def close(self) -> tuple[Connection, ...]:
        """Stop accepting registrations. Returns the members still live."""
        with self._lock:
            self._closed = True
            return tuple(self._connections.values())

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, connection: Connection) -> bool:
        with self._lock:
            return connection.id in self._connections
