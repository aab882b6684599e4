"""Status endpoint — GET /api/status.

Combines the hub's status snapshot with static process metadata.
"""

import os
import platform

from fastapi import APIRouter, Depends

from wsrelay.api.deps import get_hub
from wsrelay.realtime.hub import RelayHub
from wsrelay.schemas.status import (
    HttpServiceRead,
    ServicesRead,
    StatusRead,
    SystemRead,
    TimeRead,
    TimestampRead,
    TimezoneRead,
    UptimeRead,
    WebSocketServiceRead,
)

router = APIRouter()


@router.get("/status", response_model=StatusRead)
async def get_status(hub: RelayHub = Depends(get_hub)):
    snapshot = hub.current_status()
    return StatusRead(
        time=TimeRead(
            start=TimestampRead.model_validate(snapshot.start),
            current=TimestampRead.model_validate(snapshot.current),
            timezone=TimezoneRead.model_validate(snapshot.timezone),
        ),
        uptime=UptimeRead.model_validate(snapshot.uptime),
        services=ServicesRead(
            websocket=WebSocketServiceRead(
                port=snapshot.ws_port,
                connected_clients=snapshot.connected_clients,
            ),
            http=HttpServiceRead(port=snapshot.http_port),
        ),
        system=SystemRead(
            pid=os.getpid(),
            platform=platform.platform(),
            python_version=platform.python_version(),
        ),
        version=hub.config.service_version,
    )
