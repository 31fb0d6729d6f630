"""
Equipment API router.
Handles the equipment register, dashboard stats and CSV import.

Reads are served from the enriched inventory snapshot, so status and tag
state are always the derived values, never the stored hint.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from equiptrack.exceptions import ValidationError
from equiptrack.models.enums import CATEGORIES
from equiptrack.schemas.equipment import (
    EquipmentCreate,
    EquipmentDetailResponse,
    EquipmentResponse,
    EquipmentUpdate,
    StatsResponse,
)
from equiptrack.schemas.imports import ImportResponse
from equiptrack.schemas.movement import MovementResponse
from equiptrack.services.csv_import import parse_csv
from equiptrack.services.inventory import InventoryState, get_inventory
from equiptrack.services.response_builders import (
    build_equipment_detail,
    build_equipment_response,
    build_import_row,
    build_movement_response,
)

router = APIRouter()


@router.get("/equipment", response_model=List[EquipmentResponse])
async def get_equipment(
    bucket: Optional[str] = Query(None, alias="filter"),
    q: Optional[str] = Query(None),
    refresh: bool = Query(False),
    inventory: InventoryState = Depends(get_inventory),
):
    """
    Get the equipment list for a view.

    ``filter`` selects a bucket (All, Available, In Use, Overdue, Repair,
    Expired Tags, Due Soon); ``q`` narrows it by fuzzy text match on
    name, asset id, category, assignee and site.
    """
    if refresh:
        await inventory.refresh()

    items = await inventory.list_equipment(bucket, q)
    return [build_equipment_response(item) for item in items]


@router.get("/equipment/stats", response_model=StatsResponse)
async def get_equipment_stats(
    inventory: InventoryState = Depends(get_inventory),
):
    """Get dashboard counters over the whole register."""
    stats = await inventory.stats()
    return stats.as_dict()


@router.get("/equipment/categories", response_model=List[str])
async def get_categories():
    """Get the suggested equipment categories."""
    return CATEGORIES


@router.post("/equipment/import", response_model=ImportResponse)
async def import_equipment(
    file: UploadFile = File(...),
    dry_run: bool = Query(False),
    inventory: InventoryState = Depends(get_inventory),
):
    """
    Import equipment from a CSV file.

    With ``dry_run`` the parsed rows and their problems are returned
    without creating anything; otherwise every valid row is created.
    """
    if not file.filename:
        raise ValidationError("No file provided", fields=["file"])

    content = await file.read()
    if not content:
        raise ValidationError("Empty file", fields=["file"])

    try:
        text_content = content.decode("utf-8-sig")  # Handle BOM
    except UnicodeDecodeError:
        raise ValidationError("File must be UTF-8 encoded CSV", fields=["file"]) from None

    snapshot = await inventory.current()
    rows = parse_csv(text_content, snapshot.asset_ids())
    valid = sum(1 for row in rows if row.is_valid)

    response = {
        "dry_run": dry_run,
        "valid": valid,
        "invalid": len(rows) - valid,
        "rows": [build_import_row(row) for row in rows],
    }

    if not dry_run:
        result = await inventory.import_rows(rows)
        response.update(success=result.success, failed=result.failed, errors=result.errors)

    return response


@router.get("/equipment/{equipment_id}", response_model=EquipmentDetailResponse)
async def get_equipment_by_id(
    equipment_id: str,
    inventory: InventoryState = Depends(get_inventory),
):
    """Get one item with its movement history."""
    item = await inventory.get_equipment(equipment_id)
    movements = await inventory.list_movements(equipment_id)
    return build_equipment_detail(item, movements)


@router.get("/equipment/{equipment_id}/movements", response_model=List[MovementResponse])
async def get_equipment_movements(
    equipment_id: str,
    inventory: InventoryState = Depends(get_inventory),
):
    """Get the movement history of one item, newest first."""
    await inventory.get_equipment(equipment_id)
    movements = await inventory.list_movements(equipment_id)
    return [build_movement_response(m) for m in movements]


@router.post("/equipment", response_model=EquipmentResponse, status_code=201)
async def create_equipment(
    data: EquipmentCreate,
    inventory: InventoryState = Depends(get_inventory),
):
    """
    Register new equipment.

    New items start Available; the QR code defaults to ``QR-<asset id>``.
    """
    item = await inventory.create_equipment(data.model_dump())
    return build_equipment_response(item)


@router.put("/equipment/{equipment_id}", response_model=EquipmentResponse)
async def update_equipment(
    equipment_id: str,
    data: EquipmentUpdate,
    inventory: InventoryState = Depends(get_inventory),
):
    """Update equipment fields. Only fields present in the body change."""
    fields = data.to_fields()
    if not fields:
        raise ValidationError("No fields to update")

    item = await inventory.update_equipment(equipment_id, fields)
    return build_equipment_response(item)


@router.post("/refresh")
async def refresh_inventory(
    inventory: InventoryState = Depends(get_inventory),
):
    """Force a reload of the inventory snapshot."""
    snapshot = await inventory.refresh()
    return {
        "success": True,
        "loaded_at": snapshot.loaded_at,
        "equipment": len(snapshot.equipment),
        "movements": len(snapshot.movements),
    }
