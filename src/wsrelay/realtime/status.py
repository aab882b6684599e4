"""Status reporter — a point-in-time read of relay health.

Recomputed on every call, never cached. The start instant is fixed when
the hub is built, before any status can be requested, so uptime is never
negative.
"""

from dataclasses import dataclass
from datetime import datetime

from wsrelay.realtime.clock import Clock, Timestamp, TimezoneInfo, Uptime, elapsed
from wsrelay.realtime.registry import ConnectionRegistry


@dataclass(frozen=True)
class StatusSnapshot:
    started_at: datetime
    current_at: datetime
    start: Timestamp
    current: Timestamp
    timezone: TimezoneInfo
    uptime: Uptime
    connected_clients: int
    http_port: int
    ws_port: int


class StatusReporter:
    def __init__(
        self,
        registry: ConnectionRegistry,
        clock: Clock,
        started_at: datetime,
        *,
        http_port: int,
        ws_port: int,
    ):
        self.registry = registry
        self.clock = clock
        self.started_at = started_at
        self.http_port = http_port
        self.ws_port = ws_port

    def current_status(self) -> StatusSnapshot:
        now = self.clock.now()
        return StatusSnapshot(
            started_at=self.started_at,
            current_at=now,
            start=self.clock.timestamp(self.started_at),
            current=self.clock.timestamp(now),
            timezone=self.clock.timezone_info(now),
            uptime=elapsed(self.started_at, now),
            connected_clients=self.registry.size(),
            http_port=self.http_port,
            ws_port=self.ws_port,
        )
