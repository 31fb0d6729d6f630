"""
Health check endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack import __version__
from equiptrack.database import get_db

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    backend: str
    timestamp: str
    database: str
    snapshot_loaded_at: str | None = None
    equipment_count: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request, db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.
    Returns server status, database connectivity and snapshot age.
    """
    # Test database connectivity
    db_status = "connected"
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = f"error: {str(e)}"

    snapshot_loaded_at = None
    equipment_count = None
    inventory = getattr(request.app.state, "inventory", None)
    if inventory is not None and inventory.snapshot is not None:
        snapshot_loaded_at = inventory.snapshot.loaded_at.isoformat()
        equipment_count = len(inventory.snapshot.equipment)

    return HealthResponse(
        status="ok",
        version=__version__,
        backend="python-fastapi",
        timestamp=datetime.now(timezone.utc).isoformat(),
        database=db_status,
        snapshot_loaded_at=snapshot_loaded_at,
        equipment_count=equipment_count,
    )


@router.get("/api/health", response_model=HealthResponse)
async def api_health_check(request: Request, db: AsyncSession = Depends(get_db)):
    """
    API prefixed health check (for consistency with /api/* routes).
    """
    return await health_check(request, db)
