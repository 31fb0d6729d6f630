"""Tests for check-out/return application."""

from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest

from equiptrack.exceptions import ValidationError
from equiptrack.models.enums import CanonicalStatus, MovementType
from equiptrack.schemas.movement import MovementCreate
from equiptrack.services.movements import (
    apply_movement,
    build_movement_fields,
    plan_movement,
    validate_movement,
)

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def unassigned():
    return SimpleNamespace(
        id="eq-1",
        asset_id="TT-0001",
        current_status="Available",
        condition="Good",
        assigned_to="",
        assigned_site="",
        assigned_job="",
        expected_return_date=None,
    )


@pytest.fixture
def assigned():
    return SimpleNamespace(
        id="eq-2",
        asset_id="TT-0002",
        current_status="In Use",
        condition="Good",
        assigned_to="Jane Smith",
        assigned_site="Riverside Tower",
        assigned_job="J-100",
        expected_return_date=date(2025, 1, 15),
    )


def check_out(**fields):
    values = {"equipment_id": "eq-1", "event_type": "check_out",
              "assigned_to": "Jane Smith", "site": "Riverside Tower"}
    values.update(fields)
    return MovementCreate(**values)


def return_of(**fields):
    values = {"equipment_id": "eq-2", "event_type": "return"}
    values.update(fields)
    return MovementCreate(**values)


def test_check_out_assigns_equipment(unassigned):
    update = apply_movement(
        unassigned,
        check_out(job_reference="J-200", expected_return_date="2025-02-01"),
    )
    assert update.current_status is CanonicalStatus.IN_USE
    assert update.assigned_to == "Jane Smith"
    assert update.assigned_site == "Riverside Tower"
    assert update.assigned_job == "J-200"
    assert update.expected_return_date == date(2025, 2, 1)


def test_check_out_missing_site_is_rejected(unassigned):
    with pytest.raises(ValidationError) as exc_info:
        apply_movement(unassigned, check_out(site=""))
    assert exc_info.value.fields == ["site"]
    assert "site" in exc_info.value.message


def test_check_out_missing_both_names_both(unassigned):
    with pytest.raises(ValidationError) as exc_info:
        validate_movement(check_out(assigned_to="  ", site=""))
    assert exc_info.value.fields == ["assigned_to", "site"]


def test_check_out_of_assigned_item_still_applies(assigned, caplog):
    movement = check_out(equipment_id="eq-2", assigned_to="Bob Lee", site="Harbour Rd")
    update = apply_movement(assigned, movement)
    assert update.assigned_to == "Bob Lee"
    assert "still assigned" in caplog.text


def test_return_clears_assignment(assigned):
    update = apply_movement(assigned, return_of())
    assert update.current_status is CanonicalStatus.AVAILABLE
    assert update.assigned_to == ""
    assert update.assigned_site == ""
    assert update.assigned_job == ""
    assert update.expected_return_date is None
    assert "condition" not in update.as_dict()


@pytest.mark.parametrize("flag", ["requires_repair", "requires_service"])
def test_return_needing_attention_goes_to_repair(assigned, flag):
    update = apply_movement(assigned, return_of(**{flag: True}))
    assert update.current_status is CanonicalStatus.REPAIR
    assert update.assigned_to == ""


def test_return_condition_updates_equipment_condition(assigned):
    update = apply_movement(assigned, return_of(return_condition="Damaged"))
    assert update.as_dict()["condition"] == "Damaged"


def test_unknown_return_condition_is_rejected(assigned):
    movement = SimpleNamespace(event_type="return", return_condition="Shiny")
    with pytest.raises(ValidationError) as exc_info:
        apply_movement(assigned, movement)
    assert exc_info.value.fields == ["return_condition"]


def test_unknown_event_type_is_rejected(unassigned):
    with pytest.raises(ValidationError) as exc_info:
        validate_movement(SimpleNamespace(event_type="lost"))
    assert exc_info.value.fields == ["event_type"]


def test_validate_returns_event_type():
    assert validate_movement(return_of()) is MovementType.RETURN


def test_apply_does_not_modify_equipment(assigned):
    apply_movement(assigned, return_of(requires_repair=True))
    assert assigned.current_status == "In Use"
    assert assigned.assigned_to == "Jane Smith"


def test_check_out_photo_is_pickup_photo():
    fields = build_movement_fields("eq-1", check_out(photo_url="/uploads/p.jpg"), now=NOW)
    assert fields["pickup_photo_url"] == "/uploads/p.jpg"
    assert "return_photo_url" not in fields
    assert fields["event_type"] == "check_out"
    assert fields["event_timestamp"] == NOW
    assert fields["created_by"] == "system"


def test_return_photo_and_workflow_fields():
    movement = return_of(
        photo_url="/uploads/r.jpg",
        has_new_issues=True,
        issue_description="Cracked casing",
        requires_repair=True,
        return_condition="Poor",
    )
    fields = build_movement_fields("eq-2", movement, created_by="Site Office", now=NOW)
    assert fields["return_photo_url"] == "/uploads/r.jpg"
    assert fields["return_condition"] == "Poor"
    assert fields["has_new_issues"] is True
    assert fields["issue_description"] == "Cracked casing"
    assert fields["requires_repair"] is True
    assert fields["created_by"] == "Site Office"


def test_plan_movement_projects_both_writes(unassigned):
    plan = plan_movement(unassigned, check_out(), created_by="Office")
    assert plan.equipment_id == "eq-1"
    assert plan.movement_fields["equipment_id"] == "eq-1"
    assert plan.movement_fields["created_by"] == "Office"
    assert plan.equipment_update.current_status is CanonicalStatus.IN_USE
