"""
Movements API router.
Records check-outs and returns and lists movement history.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from equiptrack.schemas.movement import MovementCreate, MovementResponse, RecentMovementResponse
from equiptrack.services.aggregation import RECENT_MOVEMENTS_LIMIT
from equiptrack.services.inventory import InventoryState, get_inventory
from equiptrack.services.response_builders import build_movement_response, build_recent_movement

router = APIRouter()


@router.get("/movements", response_model=List[MovementResponse])
async def get_movements(
    inventory: InventoryState = Depends(get_inventory),
):
    """Get all movements, newest first."""
    movements = await inventory.list_movements()
    return [build_movement_response(m) for m in movements]


@router.get("/movements/recent", response_model=List[RecentMovementResponse])
async def get_recent_movements(
    limit: int = Query(RECENT_MOVEMENTS_LIMIT, ge=1, le=100),
    inventory: InventoryState = Depends(get_inventory),
):
    """Get the latest movements with the name and asset id of each item."""
    pairs = await inventory.recent_movements(limit)
    return [build_recent_movement(movement, item) for movement, item in pairs]


@router.post("/movements", response_model=MovementResponse, status_code=201)
async def create_movement(
    data: MovementCreate,
    inventory: InventoryState = Depends(get_inventory),
):
    """
    Record a check-out or return.

    A check-out needs ``assigned_to`` and ``site``; a return clears the
    assignment and flags the item for repair when service or repair is
    required. The movement and the equipment change are saved together.
    """
    movement = await inventory.record_movement(
        data.equipment_id, data, created_by=data.created_by
    )
    return build_movement_response(movement)
