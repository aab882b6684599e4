"""wsrelay — realtime message relay.

Producers POST a JSON payload over HTTP; the relay stamps it with a
timestamp envelope and pushes it to every connected WebSocket subscriber.
"""

__version__ = "0.1.0"
