"""Connection lifecycle — drives one subscriber from handshake to close.

Learn: serve() is the whole state machine for a single WebSocket:

1. CONNECTING: register in the registry, then queue the welcome envelope.
2. OPEN: two tasks run side by side:
   - writer: drains the connection's outbox onto the socket
   - reader: handles inbound frames ("ping" → "pong", the rest is logged)
3. Whichever task finishes first (client close, transport error, shutdown
   request) ends the connection; the other is cancelled.
4. CLOSED: deregister, exactly once, in the finally block.

Registration happens before the welcome is queued, so a broadcast racing
the handshake may land before or after the welcome. Subscribers must
accept either order.
"""

import asyncio
import json
from typing import Optional

import structlog
from starlette.websockets import WebSocket

from wsrelay.realtime.clock import Clock
from wsrelay.realtime.connection import CLOSE_FRAME, Connection, DeliveryError
from wsrelay.realtime.envelope import Envelope
from wsrelay.realtime.registry import ConnectionRegistry, RegistryClosedError

logger = structlog.get_logger()

KEEPALIVE_TOKEN = "ping"
KEEPALIVE_REPLY = "pong"

# Short frames that don't look like JSON are logged as plain text
PLAIN_TEXT_LIMIT = 100

GOING_AWAY = 1001


def _client_label(websocket: WebSocket) -> str:
    client = websocket.client
    if client is None:
        return "unknown"
    return f"{client.host}:{client.port}"


class ConnectionHandler:
    def __init__(
        self,
        registry: ConnectionRegistry,
        clock: Clock,
        *,
        welcome_message: str = "connected",
        outbox_size: int = 256,
    ):
        self.registry = registry
        self.clock = clock
        self.welcome_message = welcome_message
        self.outbox_size = outbox_size

    async def serve(self, websocket: WebSocket) -> None:
        """Run one subscriber connection until it closes."""
        await websocket.accept()
        client = _client_label(websocket)
        connection = Connection(websocket, outbox_size=self.outbox_size, client=client)

        try:
            self.registry.register(connection)
        except RegistryClosedError:
            logger.info("relay.rejected", client=client, reason="shutting_down")
            await websocket.close(code=GOING_AWAY)
            return

        log = logger.bind(connection_id=connection.id, client=client)
        log.info("relay.connected", clients=self.registry.size())

        reason = "error"
        try:
            welcome = Envelope.welcome(self.welcome_message, self.clock.timestamp())
            try:
                connection.send(welcome.to_json())
            except DeliveryError as e:
                # Shutdown closed the connection before the welcome went out
                log.info("relay.welcome_dropped", reason=e.reason)
                reason = "shutdown"
                await websocket.close(code=connection.close_code or GOING_AWAY)
                return
            connection.mark_open()
            reason = await self._run(connection, log)
        finally:
            connection.mark_closing()
            self.registry.deregister(connection)
            log.info("relay.disconnected", reason=reason, clients=self.registry.size())

    async def _run(self, connection: Connection, log) -> str:
        writer = asyncio.create_task(self._write(connection))
        reader = asyncio.create_task(self._read(connection, log))
        tasks = {writer, reader}
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        errors = [task.exception() for task in done if task.exception() is not None]
        if errors:
            log.warning("relay.transport_error", error=repr(errors[0]))
            return "error"
        return done.pop().result()

    async def _write(self, connection: Connection) -> str:
        websocket = connection.transport
        while True:
            frame = await connection.outbox.get()
            if frame is CLOSE_FRAME:
                await websocket.close(code=connection.close_code or GOING_AWAY)
                return "shutdown"
            await websocket.send_text(frame)

    async def _read(self, connection: Connection, log) -> str:
        websocket = connection.transport
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                return "closed"
            text = message.get("text")
            if text is None:
                text = (message.get("bytes") or b"").decode("utf-8", errors="replace")
            self.handle_frame(connection, text, log)

    def handle_frame(self, connection: Connection, text: str, log=logger) -> Optional[str]:
        """React to one inbound frame. Returns the reply queued, if any."""
        if text == KEEPALIVE_TOKEN:
            try:
                connection.send(KEEPALIVE_REPLY)
            except DeliveryError as e:
                log.warning("relay.keepalive_dropped", reason=e.reason)
                return None
            log.debug("relay.keepalive")
            return KEEPALIVE_REPLY

        if len(text) < PLAIN_TEXT_LIMIT and not text.startswith(("{", "[")):
            log.info("relay.text_frame", text=text)
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            log.info("relay.unparsed_frame", text=text[:PLAIN_TEXT_LIMIT])
            return None
        log.info("relay.json_frame", data=data)
        return None
