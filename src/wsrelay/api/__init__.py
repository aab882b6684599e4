"""API route aggregation.

All routers registered here get mounted in main.py under /api.
"""

from fastapi import APIRouter

from wsrelay.api.health import router as health_router
from wsrelay.api.messages import router as messages_router
from wsrelay.api.status import router as status_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(messages_router, tags=["messages"])
api_router.include_router(status_router, tags=["status"])
