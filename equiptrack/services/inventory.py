"""
Inventory application state.

Holds the enriched in-memory snapshot of equipment and movements that
the API reads from, and routes writes through the backend. One instance
is created per application in the lifespan handler and handed to the
routers through the ``get_inventory`` dependency.

Reads load both collections concurrently under one shared timeout;
either both arrive or the whole read fails and the previous snapshot
stays in place. Derived status is computed at read time only and never
written back to the store.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Protocol

from fastapi import Request

from equiptrack.exceptions import (
    AppError,
    BackendError,
    BackendTimeoutError,
    NotFoundError,
    ServiceError,
)
from equiptrack.models.enums import EquipmentStatus, FilterBucket
from equiptrack.services.aggregation import (
    RECENT_MOVEMENTS_LIMIT,
    DashboardStats,
    EnrichedEquipment,
    compute_stats,
    enrich,
    enrich_all,
    recent_movements,
)
from equiptrack.services.csv_import import ImportResult, ImportRow
from equiptrack.services.movements import plan_movement, validate_movement
from equiptrack.services.search import apply_view
from equiptrack.services.status import DEFAULT_TAG_THRESHOLD_DAYS, utc_now
from equiptrack.services.storage import PhotoStore

logger = logging.getLogger(__name__)


class Backend(Protocol):
    """Store operations the inventory state depends on."""

    async def list_equipment(self) -> list[Any]: ...

    async def list_movements(self) -> list[Any]: ...

    async def get_equipment(self, equipment_id: str) -> Any: ...

    async def create_equipment(self, fields: dict[str, Any]) -> Any: ...

    async def update_equipment(self, equipment_id: str, fields: dict[str, Any]) -> Any: ...

    async def record_movement(self, plan: Any) -> Any: ...


@dataclass(frozen=True)
class InventorySnapshot:
    """An immutable, enriched view of the store at ``loaded_at``."""

    equipment: list[EnrichedEquipment]
    movements: list[Any]
    stats: DashboardStats
    loaded_at: datetime
    _by_id: dict[str, EnrichedEquipment] = field(default_factory=dict, repr=False)

    @classmethod
    def build(cls, equipment: list[Any], movements: list[Any], now: datetime) -> "InventorySnapshot":
        enriched = enrich_all(equipment, now)
        return cls(
            equipment=enriched,
            movements=list(movements),
            stats=compute_stats(enriched, now),
            loaded_at=now,
            _by_id={item.id: item for item in enriched},
        )

    @property
    def by_id(self) -> dict[str, EnrichedEquipment]:
        return self._by_id

    def find(self, equipment_id: str) -> EnrichedEquipment | None:
        return self._by_id.get(equipment_id)

    def movements_for(self, equipment_id: str) -> list[Any]:
        return [m for m in self.movements if m.equipment_id == equipment_id]

    def asset_ids(self) -> set[str]:
        return {item.asset_id for item in self.equipment}


def equipment_defaults(fields: dict[str, Any], threshold_days: int) -> dict[str, Any]:
    """Fill in the values a newly registered item starts with."""
    values = dict(fields)
    values["current_status"] = EquipmentStatus.AVAILABLE.value
    if not values.get("qr_code"):
        values["qr_code"] = f"QR-{values.get('asset_id', '')}"
    if values.get("tag_threshold_days") is None:
        values["tag_threshold_days"] = threshold_days
    return values


class InventoryState:
    """Snapshot cache plus write operations for one application instance."""

    def __init__(
        self,
        backend: Backend,
        photo_store: PhotoStore | None = None,
        load_timeout: float = 12.0,
        max_age: float = 60,
        default_threshold_days: int = DEFAULT_TAG_THRESHOLD_DAYS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.backend = backend
        self.photo_store = photo_store
        self.load_timeout = load_timeout
        self.max_age = max_age
        self.default_threshold_days = default_threshold_days
        self._clock = clock
        self._snapshot: InventorySnapshot | None = None
        self._ready = False
        # Held while a load is in flight; at most one load runs at a time
        self._refresh_lock = asyncio.Lock()

    # ---------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------

    async def init(self) -> None:
        """Load the first snapshot. A failed load is retried on first read."""
        try:
            snapshot = await self.refresh()
            logger.info(
                "Inventory loaded: %d equipment, %d movements",
                len(snapshot.equipment),
                len(snapshot.movements),
            )
        except BackendError as exc:
            logger.warning("Initial inventory load failed, will retry on demand: %s", exc)
        self._ready = True

    async def teardown(self) -> None:
        """Drop the cached snapshot."""
        self._snapshot = None
        self._ready = False
        logger.info("Inventory state torn down")

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def snapshot(self) -> InventorySnapshot | None:
        return self._snapshot

    # ---------------------------------------------------------
    # Reads
    # ---------------------------------------------------------

    async def refresh(self) -> InventorySnapshot:
        """
        Reload both collections and swap in a fresh snapshot.

        Raises BackendTimeoutError when the shared timeout expires (both
        requests are cancelled) and BackendError for any other failure.
        The previous snapshot is kept in either case.
        """
        async with self._refresh_lock:
            return await self._load()

    async def _load(self) -> InventorySnapshot:
        try:
            equipment, movements = await asyncio.wait_for(
                asyncio.gather(self.backend.list_equipment(), self.backend.list_movements()),
                timeout=self.load_timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("Inventory load exceeded %.1fs timeout", self.load_timeout)
            raise BackendTimeoutError() from exc

        snapshot = InventorySnapshot.build(equipment, movements, self._clock())
        self._snapshot = snapshot
        return snapshot

    def _is_stale(self, snapshot: InventorySnapshot) -> bool:
        age = (self._clock() - snapshot.loaded_at).total_seconds()
        return age >= self.max_age

    async def current(self) -> InventorySnapshot:
        """Return the snapshot, reloading it when missing or stale."""
        snapshot = self._snapshot
        if snapshot is not None and not self._is_stale(snapshot):
            return snapshot

        async with self._refresh_lock:
            # Another request may have reloaded while we waited
            snapshot = self._snapshot
            if snapshot is not None and not self._is_stale(snapshot):
                return snapshot
            return await self._load()

    async def list_equipment(
        self,
        bucket: FilterBucket | str | None = FilterBucket.ALL,
        query: str | None = None,
    ) -> list[EnrichedEquipment]:
        snapshot = await self.current()
        return apply_view(snapshot.equipment, bucket, query)

    async def stats(self) -> DashboardStats:
        snapshot = await self.current()
        return snapshot.stats

    async def get_equipment(self, equipment_id: str) -> EnrichedEquipment:
        snapshot = await self.current()
        item = snapshot.find(equipment_id)
        if item is None:
            # May have been created since the snapshot was taken
            snapshot = await self.refresh()
            item = snapshot.find(equipment_id)
        if item is None:
            raise NotFoundError("Equipment", equipment_id)
        return item

    async def list_movements(self, equipment_id: str | None = None) -> list[Any]:
        snapshot = await self.current()
        if equipment_id is None:
            return snapshot.movements
        return snapshot.movements_for(equipment_id)

    async def recent_movements(
        self, limit: int = RECENT_MOVEMENTS_LIMIT
    ) -> list[tuple[Any, EnrichedEquipment | None]]:
        """Newest movements paired with their equipment, for the activity feed."""
        snapshot = await self.current()
        return recent_movements(snapshot.movements, snapshot.by_id, limit)

    # ---------------------------------------------------------
    # Writes
    # ---------------------------------------------------------

    async def _reload_after_write(self) -> None:
        """Reload after a successful write; a failed reload only marks the cache stale."""
        try:
            await self.refresh()
        except BackendError as exc:
            logger.warning("Reload after write failed, snapshot marked stale: %s", exc)
            self._snapshot = None

    async def create_equipment(self, fields: dict[str, Any]) -> EnrichedEquipment:
        values = equipment_defaults(fields, self.default_threshold_days)
        record = await self.backend.create_equipment(values)
        await self._reload_after_write()
        return enrich(record, self._clock())

    async def update_equipment(self, equipment_id: str, fields: dict[str, Any]) -> EnrichedEquipment:
        record = await self.backend.update_equipment(equipment_id, fields)
        await self._reload_after_write()
        return enrich(record, self._clock())

    async def record_movement(
        self, equipment_id: str, movement: Any, created_by: str | None = None
    ) -> Any:
        """
        Record a check-out or return.

        The request is validated before anything is read or written; the
        movement insert and equipment update are then applied together.
        """
        validate_movement(movement)
        equipment = await self.backend.get_equipment(equipment_id)
        plan = plan_movement(equipment, movement, created_by=created_by)
        recorded = await self.backend.record_movement(plan)
        await self._reload_after_write()
        return recorded

    async def import_rows(self, rows: list[ImportRow]) -> ImportResult:
        """Create an equipment item for every valid row."""
        result = ImportResult()
        for row in rows:
            if not row.is_valid:
                continue
            try:
                await self.backend.create_equipment(
                    row.to_equipment_fields(self.default_threshold_days)
                )
            except AppError as exc:
                logger.warning("Import of %s failed: %s", row.asset_id, exc)
                result.failed += 1
                result.errors.append({"asset_id": row.asset_id, "line": row.line, "error": str(exc)})
            else:
                result.success += 1

        if result.success:
            await self._reload_after_write()
        logger.info("Import finished: %d created, %d failed", result.success, result.failed)
        return result

    async def upload_photo(self, data: bytes, path: str) -> str:
        if self.photo_store is None:
            raise ServiceError("Photo storage is not configured")
        return await self.photo_store.upload_file(data, path)


def get_inventory(request: Request) -> InventoryState:
    """FastAPI dependency returning the application's inventory state."""
    inventory = getattr(request.app.state, "inventory", None)
    if inventory is None:
        raise ServiceError("Inventory state is not initialized")
    return inventory
