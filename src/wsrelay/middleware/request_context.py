"""Request context middleware — request ID + one access log line.

Learn: Every HTTP request gets an ID, either from the incoming
X-Request-ID header or a fresh UUID. The ID, method and path are bound to
structlog's contextvars, so log lines emitted while handling the request
(e.g. relay.broadcast) carry them too. The ID is echoed back in the
response header.

WebSocket scopes are not HTTP requests and pass straight through.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        response: Response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info("http.request", status=response.status_code, duration_ms=duration_ms)
        return response
