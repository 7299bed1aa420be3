"""Health check endpoints for load balancers and monitoring."""

import logging
from datetime import datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from firecert.config import settings
from firecert.database import engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Liveness: 200 whenever the process is serving requests."""
    return {
        "status": "ok",
        "service": "FireCert",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness: also verifies the database answers."""
    checks = {"service": "ok", "database": "unknown"}
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        checks["database"] = f"error: {str(e)[:100]}"

    healthy = checks["database"] == "ok"
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "service": "FireCert",
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
