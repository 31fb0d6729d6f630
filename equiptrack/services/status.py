"""
Equipment status engine.

Pure functions that derive an item's canonical lifecycle status and its
test-and-tag compliance state from the stored fields and the current
time. Nothing here touches the database or mutates its input; every
function accepts any object exposing the Equipment attributes (ORM rows,
pydantic models, simple namespaces in tests).

Dates are compared as instants in UTC. A plain ``date`` is taken as
midnight UTC on that day, matching how ISO date strings are read by the
web client.
"""

import math
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from dateutil import parser as date_parser

from equiptrack.models.enums import CanonicalStatus, EquipmentStatus, TagState

DEFAULT_TAG_THRESHOLD_DAYS = 30
SECONDS_PER_DAY = 24 * 60 * 60

# Stored values that are legacy synonyms of a canonical status
STATUS_ALIASES = {
    EquipmentStatus.MAINTENANCE.value: CanonicalStatus.REPAIR,
}

# Operator-set states that time-based logic never downgrades
STICKY_STATUSES = frozenset(
    {CanonicalStatus.REPAIR, CanonicalStatus.EXPIRED, CanonicalStatus.OVERDUE}
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _resolve_now(now: datetime | None) -> datetime:
    if now is None:
        return utc_now()
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def coerce_date(value: Any) -> date | None:
    """
    Coerce a stored or submitted date value to a ``date``.

    Accepts ``date``, ``datetime`` and ISO-8601 strings. Empty or
    unparseable values become ``None`` so downstream code can treat them
    as "not set" instead of failing.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date_parser.isoparse(text).date()
        except (ValueError, OverflowError):
            return None
    return None


def _as_instant(value: Any) -> datetime | None:
    """Convert a date-like value to an aware UTC datetime, or None."""
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            moment = date_parser.isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def normalize_status(value: Any) -> CanonicalStatus:
    """
    Map a stored status to the closed canonical set.

    ``Maintenance`` is the legacy spelling of ``Repair``. Anything that
    is not a known status (including ``None``) is treated as Available.
    """
    if isinstance(value, Enum):
        value = value.value
    if value in STATUS_ALIASES:
        return STATUS_ALIASES[value]
    try:
        return CanonicalStatus(value)
    except ValueError:
        return CanonicalStatus.AVAILABLE


def tag_threshold(equipment: Any) -> int:
    """Due-soon window in days, falling back to the default for bad values."""
    threshold = getattr(equipment, "tag_threshold_days", None)
    if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
        return DEFAULT_TAG_THRESHOLD_DAYS
    return threshold


def days_until(value: Any, now: datetime | None = None) -> int | None:
    """
    Whole days from ``now`` until ``value``, rounding partial days up.

    Negative results mean the date has passed. Returns None when the
    value is missing or unparseable.
    """
    due = _as_instant(value)
    if due is None:
        return None
    delta = due - _resolve_now(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def compute_status(equipment: Any, now: datetime | None = None) -> CanonicalStatus:
    """
    Derive the canonical lifecycle status of an item.

    Repair, Expired and Overdue are returned unchanged. In Use becomes
    Overdue once the expected return date is strictly in the past.
    Everything else is Available.
    """
    base = normalize_status(getattr(equipment, "current_status", None))

    if base in STICKY_STATUSES:
        return base

    if base is CanonicalStatus.IN_USE:
        return_at = _as_instant(getattr(equipment, "expected_return_date", None))
        if return_at is not None and return_at < _resolve_now(now):
            return CanonicalStatus.OVERDUE
        return CanonicalStatus.IN_USE

    return CanonicalStatus.AVAILABLE


def compute_tag_state(equipment: Any, now: datetime | None = None) -> TagState:
    """Derive the test-and-tag compliance state of an item."""
    diff_days = days_until(getattr(equipment, "test_tag_next_due", None), now)
    if diff_days is None:
        return TagState.NO_TAG
    if diff_days < 0:
        return TagState.EXPIRED
    if diff_days <= tag_threshold(equipment):
        return TagState.DUE_SOON
    return TagState.OK
