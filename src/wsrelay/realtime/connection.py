"""One live subscriber link.

Learn: A Connection never writes to its socket directly from the caller.
send() drops the frame into a bounded outbox and returns immediately; the
lifecycle handler runs one writer task per connection that drains the
outbox onto the transport. That is what keeps broadcast non-blocking: a
slow subscriber only fills its own outbox, and once that is full further
frames for it are dropped with a DeliveryError.

States follow the subscriber lifecycle:
CONNECTING → OPEN → CLOSING → CLOSED
Frames are accepted in CONNECTING and OPEN only.
"""

import asyncio
import enum
import uuid
from typing import Any, Optional


class ConnectionState(str, enum.Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class DeliveryError(Exception):
    """A frame could not be queued for a connection."""

    def __init__(self, connection_id: str, reason: str):
        super().__init__(f"delivery to {connection_id} failed: {reason}")
        self.connection_id = connection_id
        self.reason = reason


# Outbox sentinel asking the writer to close the transport
CLOSE_FRAME = None


class Connection:
    """A registered subscriber: identity, transport handle, outbox, state."""

    def __init__(
        self,
        transport: Any,
        *,
        outbox_size: int = 256,
        client: Optional[str] = None,
        connection_id: Optional[str] = None,
    ):
        self.id = connection_id or uuid.uuid4().hex
        self.transport = transport
        self.client = client or "unknown"
        self.state = ConnectionState.CONNECTING
        self.close_code: Optional[int] = None
        self.outbox: asyncio.Queue[Optional[str]] = asyncio.Queue(maxsize=outbox_size)

    def __repr__(self) -> str:
        return f"<Connection {self.id[:8]} {self.client} {self.state.value}>"

    @property
    def is_live(self) -> bool:
        return self.state in (ConnectionState.CONNECTING, ConnectionState.OPEN)

    def send(self, frame: str) -> None:
        """Queue a text frame for delivery. Never blocks."""
        if not self.is_live:
            raise DeliveryError(self.id, f"connection is {self.state.value}")
        try:
            self.outbox.put_nowait(frame)
        except asyncio.QueueFull:
            raise DeliveryError(self.id, "outbox full") from None

    def mark_open(self) -> None:
        if self.state is ConnectionState.CONNECTING:
            self.state = ConnectionState.OPEN

    def mark_closing(self) -> None:
        if self.is_live:
            self.state = ConnectionState.CLOSING

    def mark_closed(self) -> None:
        self.state = ConnectionState.CLOSED

    def request_close(self, code: int = 1001) -> None:
        """Ask the writer to close the transport once it reaches the sentinel.

        Pending frames are discarded so the sentinel always fits.
        """
        if not self.is_live:
            return
        self.close_code = code
        self.mark_closing()
        while True:
            try:
                self.outbox.get_nowait()
            except asyncio.QueueEmpty:
                break
        self.outbox.put_nowait(CLOSE_FRAME)
