"""Message submission — POST /api/sendmsg.

Learn: The body is any JSON value and is relayed as-is under "data".
Only absent or empty bodies are rejected; there is no payload schema.
Broadcast is best-effort and not transactional. If something fails after
broadcast ran, the subscribers already have the message and the caller
still gets a 500.
"""

import json
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from wsrelay.api.deps import get_hub
from wsrelay.realtime.hub import RelayHub
from wsrelay.schemas.message import SendMessageResponse

logger = structlog.get_logger()
router = APIRouter()


async def _read_payload(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        raise HTTPException(status_code=400, detail="Request body must not be empty")
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Request body must be valid JSON")
    # 0 and false are valid payloads; null and empty containers are not
    if payload is None or (isinstance(payload, (dict, list, str)) and not payload):
        raise HTTPException(status_code=400, detail="Request body must not be empty")
    return payload


@router.post("/sendmsg", response_model=SendMessageResponse)
async def send_message(
    request: Request,
    hub: RelayHub = Depends(get_hub),
):
    """Broadcast the JSON body to every connected subscriber."""
    payload = await _read_payload(request)

    try:
        client_count = hub.broadcast(payload)
        stamp = hub.clock.timestamp()
        return SendMessageResponse(
            client_count=client_count,
            timestamp=stamp.iso,
            local_time=stamp.local,
            timezone=stamp.timezone.timezone,
        )
    except Exception:
        logger.exception("relay.sendmsg_failed")
        raise HTTPException(status_code=500, detail="Internal server error")
