"""RelayHub — wires registry, clock, broadcaster, handler and reporter.

One hub per process. It is created by the app factory and stored on
app.state so the HTTP routes and the WebSocket route share it. When both
listeners run in one process (`wsrelay serve`), both apps get the same hub.
"""

from datetime import datetime
from typing import Optional

import structlog

from wsrelay.config import Settings, settings as default_settings
from wsrelay.realtime.broadcaster import Broadcaster
from wsrelay.realtime.clock import Clock
from wsrelay.realtime.lifecycle import GOING_AWAY, ConnectionHandler
from wsrelay.realtime.registry import ConnectionRegistry
from wsrelay.realtime.status import StatusReporter

logger = structlog.get_logger()


class RelayHub:
    def __init__(
        self,
        config: Optional[Settings] = None,
        *,
        clock: Optional[Clock] = None,
        started_at: Optional[datetime] = None,
    ):
        self.config = config or default_settings
        self.clock = clock or Clock(self.config.timezone)
        # Captured once; everything after reads it
        self.started_at = started_at or self.clock.now()

        self.registry = ConnectionRegistry()
        self.broadcaster = Broadcaster(self.registry, self.clock)
        self.handler = ConnectionHandler(
            self.registry,
            self.clock,
            welcome_message=self.config.welcome_message,
            outbox_size=self.config.outbox_size,
        )
        self.reporter = StatusReporter(
            self.registry,
            self.clock,
            self.started_at,
            http_port=self.config.http_port,
            ws_port=self.config.ws_port,
        )

    def broadcast(self, payload) -> int:
        return self.broadcaster.broadcast(payload)

    def current_status(self):
        return self.reporter.current_status()

    def shutdown(self) -> int:
        """Refuse new subscribers and ask live ones to close. Returns how many."""
        remaining = self.registry.close()
        for connection in remaining:
            connection.request_close(GOING_AWAY)
        logger.info("relay.shutdown", closing=len(remaining))
        return len(remaining)
