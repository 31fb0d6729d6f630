"""
Pydantic schemas for Movements.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from equiptrack.models.enums import EquipmentCondition, MovementType
from equiptrack.schemas.base import BaseSchema, DateSimple, DateTimeJS, OptionalDate, RequestSchema


class MovementResponse(BaseSchema):
    """Response model for a recorded movement."""

    id: str
    equipment_id: str
    event_type: str
    event_timestamp: DateTimeJS
    assigned_to: str = ""
    site: str = ""
    job_reference: str = ""
    notes: str = ""
    pickup_photo_url: str = ""
    return_photo_url: str = ""
    expected_return_date: Optional[DateSimple] = None
    return_condition: Optional[str] = None
    has_new_issues: bool = False
    issue_description: str = ""
    requires_service: bool = False
    requires_repair: bool = False
    created_by: str = "system"
    created_at: Optional[DateTimeJS] = None


class MovementCreate(RequestSchema):
    """
    Request model for a check-out or return.

    Assignee and site are checked by the movement service rather than
    here, so the error names exactly which fields a check-out is missing.
    """

    equipment_id: str = Field(..., min_length=1)
    event_type: MovementType
    event_timestamp: Optional[datetime] = None
    assigned_to: str = ""
    site: str = ""
    job_reference: str = ""
    notes: str = ""
    expected_return_date: OptionalDate = None
    photo_url: str = ""
    created_by: Optional[str] = None

    # Return workflow
    return_condition: Optional[EquipmentCondition] = None
    has_new_issues: bool = False
    issue_description: str = ""
    requires_service: bool = False
    requires_repair: bool = False


class RecentMovementResponse(MovementResponse):
    """Movement joined with the name and asset id of its equipment."""

    equipment_name: str = "Unknown"
    asset_id: str = ""
