"""Health & Readiness Probes — is the local server up, and can it reach its database.

Invariants:
    - GET /health/ always returns 200 if the process is up (liveness)
    - GET /health/ready returns 503 if the SQLite database is unreachable
"""

from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from unitrack.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])


def package_version() -> str:
    try:
        return version("unitrack")
    except PackageNotFoundError:
        return "unknown"


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "unitrack", "version": package_version()}


@router.get("/ready")
async def readiness_check():
    """Readiness probe — includes database connectivity."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
