"""Envelopes — the JSON frames pushed to subscribers.

Wire shape (kept stable for existing subscribers):

    {"type": "broadcast", "data": <payload>,
     "timestamp": "2024-01-31T12:15:00.000Z",
     "localTime": "2024/01/31 20:15:00 GMT+8",
     "timezone": "Asia/Shanghai"}

Welcome frames carry the greeting under "message" instead of "data".
"""

import json
from dataclasses import dataclass
from typing import Any

from wsrelay.realtime.clock import Timestamp

WELCOME = "welcome"
BROADCAST = "broadcast"


@dataclass(frozen=True)
class Envelope:
    kind: str
    payload: Any
    timestamp: Timestamp

    @classmethod
    def welcome(cls, greeting: str, timestamp: Timestamp) -> "Envelope":
        return cls(kind=WELCOME, payload=greeting, timestamp=timestamp)

    @classmethod
    def broadcast(cls, payload: Any, timestamp: Timestamp) -> "Envelope":
        return cls(kind=BROADCAST, payload=payload, timestamp=timestamp)

    def to_dict(self) -> dict[str, Any]:
        body_key = "message" if self.kind == WELCOME else "data"
        return {
            "type": self.kind,
            body_key: self.payload,
            "timestamp": self.timestamp.iso,
            "localTime": self.timestamp.local,
            "timezone": self.timestamp.timezone.timezone,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)
