"""Realtime core — connection registry, broadcast engine, lifecycle.

Learn: Messages flow one way:
1. HTTP POST /api/sendmsg → Broadcaster.broadcast(payload)
2. Broadcaster → every Connection in the registry snapshot (outbox enqueue)
3. Each connection's writer task → WebSocket client

Connections enter the registry on handshake and leave it exactly once on
close or error. The registry is the only shared mutable state.
"""

from wsrelay.realtime.hub import RelayHub

__all__ = ["RelayHub"]
