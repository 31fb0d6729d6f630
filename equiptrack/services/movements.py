"""
Movement application.

Turns a check-out or return request into (a) the immutable Movement row
to insert and (b) the field update it implies for the Equipment row.
Both projections are pure; the backend applies them in one transaction.

Assignment state machine::

    Unassigned --check_out--> Assigned (In Use / Overdue)
    Assigned   --return-----> Unassigned (Available, or Repair if flagged)
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from equiptrack.exceptions import ValidationError
from equiptrack.models.enums import (
    CanonicalStatus,
    EquipmentCondition,
    MovementType,
)
from equiptrack.services.status import coerce_date, utc_now

logger = logging.getLogger(__name__)

CHECK_OUT_REQUIRED_FIELDS = ("assigned_to", "site")


@dataclass
class EquipmentFieldUpdate:
    """Equipment columns written as a side effect of a movement."""

    current_status: CanonicalStatus
    assigned_to: str = ""
    assigned_site: str = ""
    assigned_job: str = ""
    expected_return_date: date | None = None
    condition: str | None = None

    def as_dict(self) -> dict:
        fields = {
            "current_status": self.current_status.value,
            "assigned_to": self.assigned_to,
            "assigned_site": self.assigned_site,
            "assigned_job": self.assigned_job,
            "expected_return_date": self.expected_return_date,
        }
        if self.condition is not None:
            fields["condition"] = self.condition
        return fields


@dataclass
class MovementPlan:
    """Everything needed to record one movement."""

    equipment_id: str
    movement_fields: dict = field(default_factory=dict)
    equipment_update: EquipmentFieldUpdate | None = None


def _text(movement: Any, name: str) -> str:
    value = getattr(movement, name, None)
    return value.strip() if isinstance(value, str) else ""


def movement_type(movement: Any) -> MovementType:
    """Resolve the event type of a movement request."""
    raw = getattr(movement, "event_type", None)
    try:
        return MovementType(raw.value if isinstance(raw, MovementType) else raw)
    except ValueError:
        raise ValidationError(
            f"Unknown movement type '{raw}'. Expected check_out or return",
            fields=["event_type"],
        ) from None


def validate_movement(movement: Any) -> MovementType:
    """
    Check a movement request before anything is written.

    Check-outs need an assignee and a site; returns need nothing beyond
    the equipment they refer to.
    """
    event_type = movement_type(movement)

    if event_type is MovementType.CHECK_OUT:
        missing = [name for name in CHECK_OUT_REQUIRED_FIELDS if not _text(movement, name)]
        if missing:
            raise ValidationError(
                f"Missing required field(s) for check-out: {', '.join(missing)}",
                fields=missing,
            )

    return_condition = getattr(movement, "return_condition", None)
    if event_type is MovementType.RETURN and return_condition:
        try:
            EquipmentCondition(return_condition)
        except ValueError:
            raise ValidationError(
                f"Unknown return condition '{return_condition}'",
                fields=["return_condition"],
            ) from None

    return event_type


def apply_movement(equipment: Any, movement: Any) -> EquipmentFieldUpdate:
    """
    Compute the equipment field update implied by a movement.

    Raises ValidationError for an incomplete check-out. The equipment
    argument is not modified.
    """
    event_type = validate_movement(movement)

    if event_type is MovementType.CHECK_OUT:
        if getattr(equipment, "assigned_to", ""):
            logger.warning(
                "Checking out %s while still assigned to %s",
                getattr(equipment, "asset_id", "?"),
                equipment.assigned_to,
            )
        return EquipmentFieldUpdate(
            current_status=CanonicalStatus.IN_USE,
            assigned_to=_text(movement, "assigned_to"),
            assigned_site=_text(movement, "site"),
            assigned_job=_text(movement, "job_reference"),
            expected_return_date=coerce_date(getattr(movement, "expected_return_date", None)),
        )

    needs_attention = bool(getattr(movement, "requires_service", False)) or bool(
        getattr(movement, "requires_repair", False)
    )
    return_condition = getattr(movement, "return_condition", None) or None
    if isinstance(return_condition, EquipmentCondition):
        return_condition = return_condition.value

    return EquipmentFieldUpdate(
        current_status=CanonicalStatus.REPAIR if needs_attention else CanonicalStatus.AVAILABLE,
        condition=return_condition,
    )


def build_movement_fields(
    equipment_id: str,
    movement: Any,
    created_by: str | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Build the column values of the Movement row to insert.

    An attached photo goes to ``pickup_photo_url`` on check-out and to
    ``return_photo_url`` on return.
    """
    event_type = validate_movement(movement)
    photo_url = _text(movement, "photo_url")

    fields = {
        "equipment_id": equipment_id,
        "event_type": event_type.value,
        "event_timestamp": getattr(movement, "event_timestamp", None) or now or utc_now(),
        "assigned_to": _text(movement, "assigned_to"),
        "site": _text(movement, "site"),
        "job_reference": _text(movement, "job_reference"),
        "notes": _text(movement, "notes"),
        "created_by": created_by or _text(movement, "created_by") or "system",
    }

    if event_type is MovementType.CHECK_OUT:
        fields["expected_return_date"] = coerce_date(
            getattr(movement, "expected_return_date", None)
        )
        fields["pickup_photo_url"] = photo_url
    else:
        return_condition = getattr(movement, "return_condition", None) or None
        if isinstance(return_condition, EquipmentCondition):
            return_condition = return_condition.value
        fields.update(
            return_photo_url=photo_url,
            return_condition=return_condition,
            has_new_issues=bool(getattr(movement, "has_new_issues", False)),
            issue_description=_text(movement, "issue_description"),
            requires_service=bool(getattr(movement, "requires_service", False)),
            requires_repair=bool(getattr(movement, "requires_repair", False)),
        )

    return fields


def plan_movement(equipment: Any, movement: Any, created_by: str | None = None) -> MovementPlan:
    """Validate a movement request and project both writes it implies."""
    equipment_update = apply_movement(equipment, movement)
    return MovementPlan(
        equipment_id=equipment.id,
        movement_fields=build_movement_fields(equipment.id, movement, created_by=created_by),
        equipment_update=equipment_update,
    )
