"""Liveness endpoint.

Learn: The relay has no backing services to probe, so health only says
the process is up and which version is running.
"""

from fastapi import APIRouter

from wsrelay import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "ok", "version": __version__}
