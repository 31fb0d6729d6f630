"""
Shared test fixtures for the Equipment Tracker test suite.
"""

import asyncio
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from equiptrack.config import Settings
from equiptrack.exceptions import ConflictError, NotFoundError
from equiptrack.models.equipment import Equipment, new_id
from equiptrack.models.movement import Movement
from equiptrack.services.backend import EQUIPMENT_WRITABLE_FIELDS
from equiptrack.services.inventory import InventoryState
from equiptrack.services.storage import PhotoStore

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)
CREATED = datetime(2024, 6, 1, 8, 30, tzinfo=timezone.utc)


def build_equipment(**overrides) -> Equipment:
    """Transient Equipment row with every column populated."""
    values = {
        "id": new_id(),
        "asset_id": "TT-0001",
        "qr_code": "",
        "name": "Makita Drill",
        "category": "Power Tools",
        "condition": "Good",
        "notes": "",
        "photo_url": "",
        "test_tag_done_date": None,
        "test_tag_next_due": None,
        "tag_threshold_days": 30,
        "current_status": "Available",
        "assigned_to": "",
        "assigned_site": "",
        "assigned_job": "",
        "expected_return_date": None,
        "created_by": None,
        "created_at": CREATED,
        "updated_at": CREATED,
    }
    values.update(overrides)
    return Equipment(**values)


def build_movement(**overrides) -> Movement:
    """Transient Movement row with every column populated."""
    values = {
        "id": new_id(),
        "equipment_id": "",
        "event_type": "check_out",
        "event_timestamp": CREATED,
        "assigned_to": "",
        "site": "",
        "job_reference": "",
        "notes": "",
        "pickup_photo_url": "",
        "return_photo_url": "",
        "expected_return_date": None,
        "return_condition": None,
        "has_new_issues": False,
        "issue_description": "",
        "requires_service": False,
        "requires_repair": False,
        "created_by": "system",
        "created_at": CREATED,
    }
    values.update(overrides)
    return Movement(**values)


class FakeBackend:
    """In-memory stand-in for SqlBackend."""

    def __init__(self, equipment=(), movements=(), delay: float = 0.0):
        self.equipment = {item.id: item for item in equipment}
        self.movements = list(movements)
        self.delay = delay
        self.fail: Exception | None = None
        self.list_calls = 0

    async def _read_pause(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail is not None:
            raise self.fail

    async def list_equipment(self):
        self.list_calls += 1
        await self._read_pause()
        return sorted(self.equipment.values(), key=lambda item: item.asset_id)

    async def list_movements(self):
        await self._read_pause()
        return sorted(self.movements, key=lambda m: m.event_timestamp, reverse=True)

    async def get_equipment(self, equipment_id):
        if equipment_id not in self.equipment:
            raise NotFoundError("Equipment", equipment_id)
        return self.equipment[equipment_id]

    async def create_equipment(self, fields):
        values = {k: v for k, v in fields.items() if k in EQUIPMENT_WRITABLE_FIELDS}
        if any(item.asset_id == values.get("asset_id") for item in self.equipment.values()):
            raise ConflictError(f"Asset ID {values.get('asset_id')} already exists")
        item = build_equipment(**values)
        self.equipment[item.id] = item
        return item

    async def update_equipment(self, equipment_id, fields):
        item = await self.get_equipment(equipment_id)
        for name, value in fields.items():
            if name in EQUIPMENT_WRITABLE_FIELDS:
                setattr(item, name, value)
        return item

    async def record_movement(self, plan):
        item = await self.get_equipment(plan.equipment_id)
        movement = build_movement(**plan.movement_fields)
        self.movements.append(movement)
        if plan.equipment_update is not None:
            for name, value in plan.equipment_update.as_dict().items():
                setattr(item, name, value)
        return movement


@pytest.fixture
def test_settings(tmp_path):
    """Settings configured for testing (no real DB connection needed)."""
    return Settings(
        db_host="localhost",
        db_port=5432,
        db_name="equiptrack_test",
        db_user="test",
        db_password="test",
        upload_dir=str(tmp_path / "uploads"),
        debug=True,
    )


@pytest.fixture
def mock_db_session():
    """Create a mock async database session."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.refresh = AsyncMock()
    return session


@pytest.fixture
def drill():
    return build_equipment(
        asset_id="TT-0001",
        name="Makita Drill",
        category="Power Tools",
        test_tag_next_due=date(2025, 6, 1),
    )


@pytest.fixture
def overdue_saw():
    return build_equipment(
        asset_id="TT-0002",
        name="Circular Saw",
        category="Cutting Equipment",
        current_status="In Use",
        assigned_to="Jane Smith",
        assigned_site="Riverside Tower",
        expected_return_date=date(2024, 12, 20),
        test_tag_next_due=date(2025, 1, 10),
    )


@pytest.fixture
def broken_laser():
    return build_equipment(
        asset_id="TT-0003",
        name="Laser Level",
        category="Survey Equipment",
        current_status="Maintenance",
        test_tag_next_due=date(2024, 11, 30),
    )


@pytest.fixture
def backend(drill, overdue_saw, broken_laser):
    checkout = build_movement(
        equipment_id=overdue_saw.id,
        assigned_to="Jane Smith",
        site="Riverside Tower",
        expected_return_date=date(2024, 12, 20),
    )
    return FakeBackend([drill, overdue_saw, broken_laser], [checkout])


@pytest.fixture
def inventory(backend, tmp_path):
    return InventoryState(
        backend=backend,
        photo_store=PhotoStore(tmp_path / "uploads"),
        load_timeout=1.0,
        max_age=60,
        clock=lambda: NOW,
    )


@pytest_asyncio.fixture
async def app_client(test_settings, mock_db_session, inventory):
    """Create a test client with an in-memory inventory and mocked database."""
    with patch("equiptrack.main.get_settings", return_value=test_settings):
        from equiptrack.main import create_app

        app = create_app()

    from equiptrack.database import get_db

    app.state.inventory = inventory
    app.dependency_overrides[get_db] = lambda: mock_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
