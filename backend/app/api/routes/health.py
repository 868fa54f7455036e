"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready reports which persistence variant is serving
    - Readiness is 503 when the selected store fails its health check
      (relational unreachable, or file document unreadable or malformed)

Design Decisions:
    - File fallback counts as ready: degraded mode is a supported, observable state
      (ADR: fail-open availability)
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.infrastructure.backend_selection import BackendState

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "ghibli-favorites-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe — selects the backend if needed and reports it."""
    selector = request.app.state.backend_selector
    backend = await selector.get()
    fallback = selector.state is BackendState.DEGRADED_FALLBACK

    if not await backend.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "file_store_unreadable" if fallback else "database_unavailable",
            },
        )
    database = "file_fallback" if fallback else "connected"
    return {"status": "ready", "checks": {"database": database}}
