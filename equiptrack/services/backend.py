"""
Data access for equipment and movements.

``SqlBackend`` is the store-facing collaborator of the inventory state:
every call opens its own session from the factory, so independent reads
can run concurrently. SQLAlchemy failures are converted to the
application error hierarchy instead of being logged and swallowed.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from equiptrack.exceptions import AppError, BackendError, ConflictError, NotFoundError
from equiptrack.models.equipment import Equipment, utcnow
from equiptrack.models.movement import Movement
from equiptrack.services.movements import MovementPlan

logger = logging.getLogger(__name__)

# Columns that may be written through create/update
EQUIPMENT_WRITABLE_FIELDS = frozenset(
    {
        "asset_id",
        "qr_code",
        "name",
        "category",
        "condition",
        "notes",
        "photo_url",
        "test_tag_done_date",
        "test_tag_next_due",
        "tag_threshold_days",
        "current_status",
        "assigned_to",
        "assigned_site",
        "assigned_job",
        "expected_return_date",
        "created_by",
    }
)


class SqlBackend:
    """Equipment/movement store on top of an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
            except AppError:
                await session.rollback()
                raise
            except IntegrityError as exc:
                await session.rollback()
                logger.warning("Integrity error while trying to %s: %s", action, exc.orig)
                raise ConflictError(f"Could not {action}: conflicting record") from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.exception("Backend failure while trying to %s", action)
                raise BackendError(f"Failed to {action}", detail=str(exc)) from exc

    async def list_equipment(self) -> list[Equipment]:
        """All equipment ordered by asset id."""
        async with self._session("load equipment") as session:
            result = await session.execute(select(Equipment).order_by(Equipment.asset_id))
            return list(result.scalars().all())

    async def list_movements(self) -> list[Movement]:
        """All movements, newest first."""
        async with self._session("load movements") as session:
            result = await session.execute(
                select(Movement).order_by(Movement.event_timestamp.desc())
            )
            return list(result.scalars().all())

    async def get_equipment(self, equipment_id: str) -> Equipment:
        async with self._session("load equipment") as session:
            return await self._get_equipment(session, equipment_id)

    async def _get_equipment(self, session: AsyncSession, equipment_id: str) -> Equipment:
        result = await session.execute(select(Equipment).where(Equipment.id == equipment_id))
        equipment = result.scalar_one_or_none()
        if equipment is None:
            raise NotFoundError("Equipment", equipment_id)
        return equipment

    async def create_equipment(self, fields: dict[str, Any]) -> Equipment:
        """Insert a new equipment row; asset ids must be unique."""
        values = {k: v for k, v in fields.items() if k in EQUIPMENT_WRITABLE_FIELDS}

        async with self._session("create equipment") as session:
            existing = await session.execute(
                select(Equipment.id).where(Equipment.asset_id == values.get("asset_id"))
            )
            if existing.scalar_one_or_none() is not None:
                raise ConflictError(f"Asset ID {values.get('asset_id')} already exists")

            equipment = Equipment(**values)
            session.add(equipment)
            await session.commit()
            await session.refresh(equipment)

        logger.info("Created equipment %s (%s)", equipment.asset_id, equipment.id)
        return equipment

    async def update_equipment(self, equipment_id: str, fields: dict[str, Any]) -> Equipment:
        """Apply a partial update; last write wins."""
        async with self._session("update equipment") as session:
            equipment = await self._get_equipment(session, equipment_id)

            new_asset_id = fields.get("asset_id")
            if new_asset_id and new_asset_id != equipment.asset_id:
                clash = await session.execute(
                    select(Equipment.id).where(Equipment.asset_id == new_asset_id)
                )
                if clash.scalar_one_or_none() is not None:
                    raise ConflictError(f"Asset ID {new_asset_id} already exists")

            for name, value in fields.items():
                if name in EQUIPMENT_WRITABLE_FIELDS:
                    setattr(equipment, name, value)
            equipment.updated_at = utcnow()

            await session.commit()
            await session.refresh(equipment)
            return equipment

    async def record_movement(self, plan: MovementPlan) -> Movement:
        """
        Insert a movement and apply its equipment update atomically.

        Both writes share one transaction, so a failure leaves neither a
        movement without its equipment change nor the reverse.
        """
        async with self._session("record movement") as session:
            equipment = await self._get_equipment(session, plan.equipment_id)

            movement = Movement(**plan.movement_fields)
            session.add(movement)

            if plan.equipment_update is not None:
                for name, value in plan.equipment_update.as_dict().items():
                    setattr(equipment, name, value)
            equipment.updated_at = utcnow()

            await session.commit()
            await session.refresh(movement)

        logger.info(
            "Recorded %s for equipment %s (movement %s)",
            movement.event_type,
            plan.equipment_id,
            movement.id,
        )
        return movement
