"""Broadcast engine — one payload, every live subscriber.

Learn: broadcast() is synchronous and bounded by the registry size. It
builds one envelope (one shared timestamp), serializes it once, and
queues the same frame on every connection in the registry snapshot.
Delivery is fire-and-forget: a failed enqueue is logged and skipped,
never retried, and never stops the loop. The return value is the number
of connections attempted, not the number that succeeded.
"""

from typing import Any

import structlog

from wsrelay.realtime.clock import Clock
from wsrelay.realtime.connection import DeliveryError
from wsrelay.realtime.envelope import Envelope
from wsrelay.realtime.registry import ConnectionRegistry

logger = structlog.get_logger()


class Broadcaster:
    def __init__(self, registry: ConnectionRegistry, clock: Clock):
        self.registry = registry
        self.clock = clock

    def broadcast(self, payload: Any) -> int:
        """Deliver `payload` to the current registry snapshot. Returns attempts."""
        envelope = Envelope.broadcast(payload, self.clock.timestamp())
        frame = envelope.to_json()

        targets = self.registry.snapshot()
        failed = 0
        for connection in targets:
            try:
                connection.send(frame)
            except DeliveryError as e:
                failed += 1
                logger.warning(
                    "relay.delivery_failed",
                    connection_id=connection.id,
                    reason=e.reason,
                )
            except Exception:
                failed += 1
                logger.exception("relay.delivery_error", connection_id=connection.id)

        logger.info(
            "relay.broadcast",
            attempted=len(targets),
            failed=failed,
            timestamp=envelope.timestamp.iso,
        )
        return len(targets)
