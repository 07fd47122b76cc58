"""Health check API endpoint."""

import logging
from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter
from sqlalchemy import text

from plan_ledger import __version__

from ..schemas.common import HealthStatus

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "/health",
    response_model=HealthStatus,
    operation_id="getHealth",
    summary="Check service health",
)
async def health_check():
    """
    Check the health of the service components.

    **No headers required.**

    Returns status of:
    - Database connection (or `disabled` when running in memory)
    - Plan service
    """
    components: Dict[str, Dict[str, Any]] = {}

    try:
        from plan_ledger.db.connection import db
        if not db.config.enabled:
            components["database"] = {
                "status": "disabled",
                "message": "Database disabled, entries kept in memory"
            }
        else:
            async with db.session() as session:
                await session.execute(text("SELECT 1"))
            components["database"] = {
                "status": "healthy",
                "message": "Connected"
            }
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        components["database"] = {
            "status": "unhealthy",
            "message": str(e)
        }

    try:
        from plan_ledger.core.plan.service import get_plan_service
        service = get_plan_service()
        components["plan_service"] = {
            "status": "healthy",
            "repository": type(service.repository).__name__,
        }
    except Exception as e:
        components["plan_service"] = {
            "status": "unhealthy",
            "message": str(e)
        }

    unhealthy = any(
        c.get("status") == "unhealthy"
        for c in components.values()
    )

    return HealthStatus(
        status="unhealthy" if unhealthy else "healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        components=components,
    )


@router.get(
    "/",
    response_model=Dict[str, str],
    operation_id="getRoot",
    summary="Get API information",
)
async def root():
    """Root endpoint with API information and documentation links."""
    return {
        "service": "Plan Ledger",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
