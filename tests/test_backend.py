"""Tests for the SQLAlchemy-backed store."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from conftest import build_equipment
from equiptrack.exceptions import BackendError, ConflictError, NotFoundError
from equiptrack.models.movement import Movement
from equiptrack.schemas.movement import MovementCreate
from equiptrack.services.backend import SqlBackend
from equiptrack.services.movements import plan_movement


def result_with(value):
    """Mock query result whose scalar_one_or_none() returns ``value``."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def session(mock_db_session):
    mock_db_session.add = MagicMock()
    return mock_db_session


@pytest.fixture
def sql_backend(session):
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    factory.return_value.__aexit__.return_value = False
    return SqlBackend(factory)


@pytest.fixture
def drill():
    return build_equipment(asset_id="TT-0001", name="Makita Drill")


def check_out_plan(equipment):
    movement = MovementCreate(
        equipment_id=equipment.id,
        event_type="check_out",
        assigned_to="Bob Lee",
        site="Harbour Rd",
    )
    return plan_movement(equipment, movement)


@pytest.mark.asyncio
async def test_record_movement_writes_both_in_one_commit(sql_backend, session, drill):
    session.execute.return_value = result_with(drill)
    seen_at_commit = {}

    async def commit():
        seen_at_commit["added"] = [call.args[0] for call in session.add.call_args_list]
        seen_at_commit["status"] = drill.current_status
        seen_at_commit["assigned_to"] = drill.assigned_to

    session.commit.side_effect = commit

    movement = await sql_backend.record_movement(check_out_plan(drill))

    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()
    assert isinstance(movement, Movement)
    assert seen_at_commit["added"] == [movement]
    assert seen_at_commit["status"] == "In Use"
    assert seen_at_commit["assigned_to"] == "Bob Lee"
    assert movement.equipment_id == drill.id


@pytest.mark.asyncio
async def test_record_movement_failure_rolls_back(sql_backend, session, drill):
    session.execute.return_value = result_with(drill)
    session.commit.side_effect = SQLAlchemyError("connection lost")

    with pytest.raises(BackendError) as exc_info:
        await sql_backend.record_movement(check_out_plan(drill))

    assert exc_info.value.status_code == 503
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_record_movement_unknown_equipment(sql_backend, session, drill):
    plan = check_out_plan(drill)
    session.execute.return_value = result_with(None)

    with pytest.raises(NotFoundError):
        await sql_backend.record_movement(plan)

    session.add.assert_not_called()
    session.commit.assert_not_awaited()
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_integrity_error_becomes_conflict(sql_backend, session):
    session.execute.return_value = result_with(None)
    session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

    with pytest.raises(ConflictError):
        await sql_backend.create_equipment({"asset_id": "TT-0100", "name": "Pump"})

    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_duplicate_asset_id_is_rejected_before_insert(sql_backend, session):
    session.execute.return_value = result_with("existing-id")

    with pytest.raises(ConflictError) as exc_info:
        await sql_backend.create_equipment({"asset_id": "TT-0001", "name": "Drill"})

    assert "TT-0001" in exc_info.value.message
    session.add.assert_not_called()
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_ignores_unknown_fields(sql_backend, session):
    session.execute.return_value = result_with(None)

    created = await sql_backend.create_equipment(
        {"asset_id": "TT-0100", "name": "Pump", "category": "General", "status": "Overdue"}
    )

    assert created.asset_id == "TT-0100"
    session.add.assert_called_once_with(created)
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_asset_id_clash(sql_backend, session, drill):
    session.execute.side_effect = [result_with(drill), result_with("other-id")]

    with pytest.raises(ConflictError):
        await sql_backend.update_equipment(drill.id, {"asset_id": "TT-0002"})

    session.commit.assert_not_awaited()
    session.rollback.assert_awaited_once()
    assert drill.asset_id == "TT-0001"


@pytest.mark.asyncio
async def test_update_sets_fields_and_timestamp(sql_backend, session, drill):
    session.execute.return_value = result_with(drill)
    before = drill.updated_at

    updated = await sql_backend.update_equipment(drill.id, {"name": "Hammer Drill", "id": "x"})

    assert updated.name == "Hammer Drill"
    assert updated.id != "x"
    assert updated.updated_at > before
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_read_failure_becomes_backend_error(sql_backend, session):
    session.execute.side_effect = SQLAlchemyError("timeout")

    with pytest.raises(BackendError):
        await sql_backend.list_equipment()

    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_list_equipment_returns_rows(sql_backend, session, drill):
    result = MagicMock()
    result.scalars.return_value.all.return_value = [drill]
    session.execute.return_value = result

    assert await sql_backend.list_equipment() == [drill]
