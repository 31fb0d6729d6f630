"""
Pydantic schemas for request/response validation.
"""

from equiptrack.schemas.equipment import (
    EquipmentResponse,
    EquipmentDetailResponse,
    EquipmentCreate,
    EquipmentUpdate,
    SiteCount,
    StatsResponse,
)
from equiptrack.schemas.movement import (
    MovementResponse,
    MovementCreate,
    RecentMovementResponse,
)
from equiptrack.schemas.imports import (
    ImportRowResponse,
    ImportResponse,
    UploadResponse,
)

__all__ = [
    # Equipment
    "EquipmentResponse",
    "EquipmentDetailResponse",
    "EquipmentCreate",
    "EquipmentUpdate",
    "SiteCount",
    "StatsResponse",
    # Movements
    "MovementResponse",
    "MovementCreate",
    "RecentMovementResponse",
    # Import / upload
    "ImportRowResponse",
    "ImportResponse",
    "UploadResponse",
]
