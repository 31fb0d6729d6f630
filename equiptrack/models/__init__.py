"""
SQLAlchemy models package.
All models inherit from the Base class defined in database.py.
"""

from equiptrack.models.enums import (
    CATEGORIES,
    CanonicalStatus,
    EquipmentCondition,
    EquipmentStatus,
    FilterBucket,
    MovementType,
    TagState,
)
from equiptrack.models.equipment import Equipment
from equiptrack.models.movement import Movement

__all__ = [
    "Equipment",
    "Movement",
    # Enumerations
    "CATEGORIES",
    "CanonicalStatus",
    "EquipmentCondition",
    "EquipmentStatus",
    "FilterBucket",
    "MovementType",
    "TagState",
]
