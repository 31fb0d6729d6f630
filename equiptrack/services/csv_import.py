"""
CSV import of equipment.

Parses a spreadsheet export into rows, validates each one against the
current register and reports per-row problems so a client can preview
the import before committing it.

Expected format (header names are case-insensitive, common aliases are
accepted)::

    asset_id,name,category,condition,notes,test_tag_done_date,test_tag_next_due
    TT-0025,Makita Drill,Power Tools,Good,Heavy duty,2026-01-15,2026-07-15
"""

import csv
import io
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from equiptrack.models.enums import EquipmentCondition, EquipmentStatus
from equiptrack.services.status import DEFAULT_TAG_THRESHOLD_DAYS, coerce_date

COLUMN_ALIASES = {
    "asset_id": ("asset_id", "asset id", "id"),
    "name": ("name", "equipment name", "equipment"),
    "category": ("category", "type"),
    "condition": ("condition",),
    "notes": ("notes", "description"),
    "test_tag_done_date": ("test_tag_done_date", "last_test", "last test"),
    "test_tag_next_due": ("test_tag_next_due", "next_test", "next test"),
    "qr_code": ("qr_code", "qr"),
}

_CONDITIONS = {c.value.lower(): c.value for c in EquipmentCondition}


@dataclass
class ImportRow:
    """One parsed CSV line and the problems found with it."""

    line: int
    asset_id: str
    name: str
    category: str = "General"
    condition: str = EquipmentCondition.GOOD.value
    notes: str = ""
    test_tag_done_date: date | None = None
    test_tag_next_due: date | None = None
    qr_code: str = ""
    errors: list[str] = field(default_factory=list)
    is_duplicate: bool = False

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_equipment_fields(self, threshold_days: int = DEFAULT_TAG_THRESHOLD_DAYS) -> dict:
        return {
            "asset_id": self.asset_id,
            "qr_code": self.qr_code or f"QR-{self.asset_id}",
            "name": self.name,
            "category": self.category,
            "condition": self.condition,
            "notes": self.notes,
            "test_tag_done_date": self.test_tag_done_date,
            "test_tag_next_due": self.test_tag_next_due,
            "current_status": EquipmentStatus.AVAILABLE.value,
            "tag_threshold_days": threshold_days,
        }


@dataclass
class ImportResult:
    success: int = 0
    failed: int = 0
    errors: list[dict] = field(default_factory=list)


def _normalize_header(value: str) -> str:
    return value.strip().lower().replace('"', "").replace("'", "")


def _pick(values: dict[str, str], column: str) -> str:
    for alias in COLUMN_ALIASES[column]:
        if values.get(alias):
            return values[alias]
    return ""


def _parse_date(raw: str, label: str, errors: list[str]) -> date | None:
    if not raw:
        return None
    parsed = coerce_date(raw)
    if parsed is None:
        errors.append(f"Invalid {label} date")
    return parsed


def parse_csv(text: str, existing_asset_ids: Iterable[str] = ()) -> list[ImportRow]:
    """
    Parse CSV text into import rows.

    Asset ids are compared case-insensitively against ``existing_asset_ids``
    and against earlier rows of the same file.
    """
    # Remove BOM if present
    if text.startswith("\ufeff"):
        text = text[1:]

    rows = list(csv.reader(io.StringIO(text.strip())))
    if len(rows) < 2:
        return []

    header = [_normalize_header(h) for h in rows[0]]
    seen = {asset_id.lower() for asset_id in existing_asset_ids if asset_id}
    parsed: list[ImportRow] = []

    for line_number, row in enumerate(rows[1:], start=2):
        if not any(cell.strip() for cell in row):
            continue

        values = {
            column: (row[i].strip() if i < len(row) else "") for i, column in enumerate(header)
        }
        errors: list[str] = []

        asset_id = _pick(values, "asset_id")
        name = _pick(values, "name")
        if not asset_id:
            errors.append("Missing Asset ID")
        if not name:
            errors.append("Missing Name")

        is_duplicate = bool(asset_id) and asset_id.lower() in seen
        if is_duplicate:
            errors.append("Duplicate Asset ID")
        elif asset_id:
            seen.add(asset_id.lower())

        raw_condition = _pick(values, "condition") or EquipmentCondition.GOOD.value
        condition = _CONDITIONS.get(raw_condition.lower())
        if condition is None:
            errors.append(f"Invalid condition '{raw_condition}'")
            condition = raw_condition

        parsed.append(
            ImportRow(
                line=line_number,
                asset_id=asset_id,
                name=name,
                category=_pick(values, "category") or "General",
                condition=condition,
                notes=_pick(values, "notes"),
                test_tag_done_date=_parse_date(
                    _pick(values, "test_tag_done_date"), "last test", errors
                ),
                test_tag_next_due=_parse_date(
                    _pick(values, "test_tag_next_due"), "next test", errors
                ),
                qr_code=_pick(values, "qr_code"),
                errors=errors,
                is_duplicate=is_duplicate,
            )
        )

    return parsed
