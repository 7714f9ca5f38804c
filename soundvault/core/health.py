"""Health check endpoint."""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from .config import app_settings
from .database import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)) -> dict:
    """
    Health check endpoint for load balancers and monitoring.
    """
    checks = {
        "status": "healthy",
        "service": app_settings.app_name,
        "version": app_settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {},
    }

    try:
        await db.execute(text("SELECT 1"))
        checks["services"]["database"] = "ok"
    except Exception as e:
        checks["services"]["database"] = f"error: {e.__class__.__name__}"
        checks["status"] = "unhealthy"

    return checks
