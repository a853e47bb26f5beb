"""Health Routes — liveness and readiness checks for the container platform.

Invariants:
    - GET /api/v1/health/ answers 200 whenever the process can serve requests
    - GET /api/v1/health/ready answers 503 until the database round-trips a query
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

import app.infrastructure.database as database

SERVICE_NAME = "gatherwise-api"
SERVICE_VERSION = "1.0.0"

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/")
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/ready")
async def readiness():
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
