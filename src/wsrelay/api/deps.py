from fastapi import Request

from wsrelay.realtime.hub import RelayHub


def get_hub(request: Request) -> RelayHub:
    """The process-wide hub stored on app.state by the app factory."""
    return request.app.state.hub
