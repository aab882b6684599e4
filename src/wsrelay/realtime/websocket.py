"""WebSocket endpoint — the realtime subscription channel.

Learn: The same handler is mounted twice: at /ws on the HTTP app and at /
on the dedicated realtime app (ws://host:WS_PORT). Both resolve the hub
from app.state, so a subscriber on either port receives every broadcast.
"""

from fastapi import APIRouter, WebSocket

router = APIRouter()


async def subscribe(websocket: WebSocket):
    """Hand the socket to the hub's lifecycle handler until it closes."""
    hub = websocket.app.state.hub
    await hub.handler.serve(websocket)


router.add_api_websocket_route("/ws", subscribe)

# Dedicated realtime listener serves subscribers at the root path
root_router = APIRouter()
root_router.add_api_websocket_route("/", subscribe)
