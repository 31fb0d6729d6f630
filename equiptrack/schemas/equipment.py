"""
Pydantic schemas for Equipment.
"""

from typing import Any, Optional

from pydantic import ConfigDict, Field

from equiptrack.models.enums import (
    CanonicalStatus,
    EquipmentCondition,
    EquipmentStatus,
    TagState,
)
from equiptrack.schemas.base import (
    BaseSchema,
    DateSimple,
    DateTimeJS,
    OptionalDate,
    RequestSchema,
)
from equiptrack.schemas.movement import MovementResponse

# Columns that may legitimately be cleared with an explicit null
NULLABLE_FIELDS = {"test_tag_done_date", "test_tag_next_due"}


class EquipmentResponse(BaseSchema):
    """Response model for equipment, including derived state."""

    id: str
    asset_id: str
    qr_code: str = ""
    name: str
    category: str
    condition: str
    notes: str = ""
    photo_url: str = ""
    test_tag_done_date: Optional[DateSimple] = None
    test_tag_next_due: Optional[DateSimple] = None
    tag_threshold_days: int = 30
    current_status: str
    status: CanonicalStatus
    tag_state: TagState
    assigned_to: str = ""
    assigned_site: str = ""
    assigned_job: str = ""
    expected_return_date: Optional[DateSimple] = None
    created_by: Optional[str] = None
    created_at: Optional[DateTimeJS] = None
    updated_at: Optional[DateTimeJS] = None


class EquipmentDetailResponse(EquipmentResponse):
    """Equipment detail with compliance countdown and movement history."""

    days_until_due: Optional[int] = None
    movements: list[MovementResponse] = []


class EquipmentCreate(RequestSchema):
    """Request model for registering equipment."""

    asset_id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=100)
    condition: EquipmentCondition = EquipmentCondition.GOOD
    qr_code: Optional[str] = Field(None, max_length=128)
    notes: str = ""
    photo_url: str = ""
    test_tag_done_date: OptionalDate = None
    test_tag_next_due: OptionalDate = None
    tag_threshold_days: Optional[int] = Field(None, ge=0)
    created_by: Optional[str] = Field(None, max_length=200)


class EquipmentUpdate(RequestSchema):
    """Request model for editing equipment; only sent fields are changed."""

    asset_id: Optional[str] = Field(None, min_length=1, max_length=64)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    condition: Optional[EquipmentCondition] = None
    qr_code: Optional[str] = Field(None, max_length=128)
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    test_tag_done_date: OptionalDate = None
    test_tag_next_due: OptionalDate = None
    tag_threshold_days: Optional[int] = Field(None, ge=0)
    current_status: Optional[EquipmentStatus] = None

    def to_fields(self) -> dict[str, Any]:
        """Changed columns; explicit nulls only survive for nullable columns."""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name in NULLABLE_FIELDS
        }


class SiteCount(BaseSchema):
    site: str
    count: int


class StatsResponse(BaseSchema):
    """Dashboard counters, compliance summary and site utilisation."""

    model_config = ConfigDict(populate_by_name=True)

    total: int
    available: int
    in_use: int = Field(alias="inUse")
    overdue: int
    repair: int
    expired_tags: int = Field(alias="expiredTags")
    due_soon: int = Field(alias="dueSoon")
    compliant: int = 0
    no_tag: int = Field(0, alias="noTag")
    site_utilization: list[SiteCount] = Field(default_factory=list, alias="siteUtilization")
