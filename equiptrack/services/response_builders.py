"""
Shared response builder utilities.

Centralizes building API response dicts from enriched equipment and
movement rows, so routers stay free of field-by-field copying.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterable

from equiptrack.services.status import days_until

if TYPE_CHECKING:
    from equiptrack.services.aggregation import EnrichedEquipment
    from equiptrack.services.csv_import import ImportRow

MOVEMENT_FIELDS = (
    "id",
    "equipment_id",
    "event_type",
    "event_timestamp",
    "assigned_to",
    "site",
    "job_reference",
    "notes",
    "pickup_photo_url",
    "return_photo_url",
    "expected_return_date",
    "return_condition",
    "has_new_issues",
    "issue_description",
    "requires_service",
    "requires_repair",
    "created_by",
    "created_at",
)


def build_equipment_response(item: EnrichedEquipment) -> dict:
    """Build equipment response dict with derived status and tag state."""
    record = item.record
    return {
        "id": record.id,
        "asset_id": record.asset_id,
        "qr_code": record.qr_code or "",
        "name": record.name,
        "category": record.category,
        "condition": record.condition,
        "notes": record.notes or "",
        "photo_url": record.photo_url or "",
        "test_tag_done_date": record.test_tag_done_date,
        "test_tag_next_due": record.test_tag_next_due,
        "tag_threshold_days": record.tag_threshold_days,
        "current_status": record.current_status,
        "status": item.status,
        "tag_state": item.tag_state,
        "assigned_to": record.assigned_to or "",
        "assigned_site": record.assigned_site or "",
        "assigned_job": record.assigned_job or "",
        "expected_return_date": record.expected_return_date,
        "created_by": record.created_by,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


def build_equipment_detail(
    item: EnrichedEquipment,
    movements: Iterable[Any],
    now: datetime | None = None,
) -> dict:
    """Equipment response plus days until the next test and movement history."""
    response = build_equipment_response(item)
    response["days_until_due"] = days_until(item.record.test_tag_next_due, now)
    response["movements"] = [build_movement_response(m) for m in movements]
    return response


def build_movement_response(movement: Any) -> dict:
    return {name: getattr(movement, name, None) for name in MOVEMENT_FIELDS}


def build_import_row(row: ImportRow) -> dict:
    return {
        "line": row.line,
        "asset_id": row.asset_id,
        "name": row.name,
        "category": row.category,
        "condition": row.condition,
        "notes": row.notes,
        "test_tag_done_date": row.test_tag_done_date,
        "test_tag_next_due": row.test_tag_next_due,
        "qr_code": row.qr_code,
        "is_valid": row.is_valid,
        "is_duplicate": row.is_duplicate,
        "errors": list(row.errors),
    }


def build_recent_movement(movement: Any, item: Any | None) -> dict:
    """Movement response plus the name and asset id of its equipment."""
    response = build_movement_response(movement)
    response["equipment_name"] = item.name if item is not None else "Unknown"
    response["asset_id"] = item.asset_id if item is not None else ""
    return response
