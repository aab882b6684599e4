"""FastAPI application factories.

Learn: Two apps share one RelayHub:
- create_app():    HTTP API (submit, status, health, index) + /ws
- create_ws_app(): dedicated realtime listener, subscribers at /

`wsrelay serve` runs both in one event loop on HTTP_PORT and WS_PORT.
Only the HTTP app owns the lifespan hooks (startup log, shutdown drain),
so the hub is shut down once.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wsrelay import __version__
from wsrelay.api import api_router
from wsrelay.config import Settings, settings as default_settings
from wsrelay.logs import setup_logging
from wsrelay.realtime.hub import RelayHub
from wsrelay.schemas.status import IndexRead

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the listening endpoints at startup; drain subscribers at shutdown."""
    hub: RelayHub = app.state.hub
    setup_logging(hub.config.log_level, json=hub.config.log_json)

    start = hub.clock.timestamp(hub.started_at)
    tz = hub.clock.timezone_info()
    logger.info(
        "wsrelay.starting",
        version=__version__,
        environment=hub.config.environment,
        http_port=hub.config.http_port,
        ws_port=hub.config.ws_port,
        started_at=start.local,
        timezone=tz.timezone,
        offset=tz.offset_string,
    )
    if tz.error:
        logger.warning("wsrelay.timezone_invalid", error=tz.error)

    yield

    logger.info("wsrelay.shutdown")
    hub.shutdown()


def create_app(
    hub: Optional[RelayHub] = None,
    config: Optional[Settings] = None,
) -> FastAPI:
    """Build the HTTP application."""
    config = config or (hub.config if hub else default_settings)
    hub = hub or RelayHub(config)

    app = FastAPI(
        title="wsrelay",
        description="Relay HTTP submissions to WebSocket subscribers",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.hub = hub

    # ── Middleware stack ──────────────────────────────────────
    from wsrelay.middleware.request_context import RequestContextMiddleware

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    from wsrelay.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    @app.get("/", response_model=IndexRead)
    async def index():
        return IndexRead(
            message="wsrelay: HTTP to WebSocket message relay",
            version=config.service_version,
            endpoints={
                "POST /api/sendmsg": "Broadcast a JSON message to WebSocket subscribers",
                "GET /api/status": "Service status, uptime and connection count",
                "GET /api/health": "Liveness check",
            },
            websocket_url=f"ws://localhost:{config.ws_port}",
        )

    return app


def create_ws_app(hub: RelayHub) -> FastAPI:
    """Build the dedicated realtime listener for an existing hub."""
    app = FastAPI(title="wsrelay realtime", version=__version__, openapi_url=None)
    app.state.hub = hub

    from wsrelay.realtime.websocket import root_router
    app.include_router(root_router)

    return app


# Default app instance (used by uvicorn: wsrelay.main:app)
app = create_app()
