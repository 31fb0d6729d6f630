"""
String enumerations shared by models, schemas and services.

All of these subclass ``str`` so they compare equal to the raw values
stored in the database and serialise as plain strings.
"""

from enum import Enum


class EquipmentCondition(str, Enum):
    NEW = "New"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    DAMAGED = "Damaged"
    NOT_WORKING = "Not Working"  # legacy


class EquipmentStatus(str, Enum):
    """Values that may appear in the stored ``current_status`` column."""

    AVAILABLE = "Available"
    IN_USE = "In Use"
    OVERDUE = "Overdue"
    EXPIRED = "Expired"
    REPAIR = "Repair"
    MAINTENANCE = "Maintenance"  # legacy alias of Repair


class CanonicalStatus(str, Enum):
    """Derived lifecycle status; never contains legacy aliases."""

    AVAILABLE = "Available"
    IN_USE = "In Use"
    OVERDUE = "Overdue"
    EXPIRED = "Expired"
    REPAIR = "Repair"


class TagState(str, Enum):
    OK = "OK"
    DUE_SOON = "Due Soon"
    EXPIRED = "Expired"
    NO_TAG = "No Tag"


class MovementType(str, Enum):
    CHECK_OUT = "check_out"
    RETURN = "return"


class FilterBucket(str, Enum):
    ALL = "All"
    AVAILABLE = "Available"
    IN_USE = "In Use"
    OVERDUE = "Overdue"
    REPAIR = "Repair"
    MAINTENANCE = "Maintenance"  # alias of Repair
    EXPIRED_TAGS = "Expired Tags"
    DUE_SOON = "Due Soon"


CATEGORIES = [
    "Power Tools",
    "Survey Equipment",
    "Compaction",
    "Power Supply",
    "Cutting Equipment",
    "Fastening Tools",
    "Demolition",
    "Electrical Testing",
    "Access Equipment",
    "General",
    "Safety Equipment",
    "Hand Tools",
]
