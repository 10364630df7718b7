"""Health check endpoint for load balancers and monitoring."""

import logging
import os

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def health(request: Request):
    """Simple liveness check. Optionally includes built_at if BACKEND_BUILT_AT env is set."""
    payload: dict = {"status": "ok", "storage": request.app.state.storage.backend.value}
    built_at = os.environ.get("BACKEND_BUILT_AT")
    if built_at:
        payload["built_at"] = built_at
    return payload


@router.get("/ready")
async def readiness(request: Request):
    """Readiness: app + storage connectivity."""
    provider = request.app.state.storage
    try:
        await provider.ping()
    except Exception as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content={"status": "error", "storage": provider.backend.value, "detail": str(e)},
        )
    return {"status": "ok", "storage": provider.backend.value}
