"""
Dashboard aggregation over a collection of equipment.

Each record is enriched once with its derived status and tag state; the
counters are then a single pass over the enriched list.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping

from equiptrack.models.enums import CanonicalStatus, TagState
from equiptrack.services.status import compute_status, compute_tag_state, utc_now

RECENT_MOVEMENTS_LIMIT = 8


@dataclass(frozen=True)
class EnrichedEquipment:
    """An equipment record with its derived values memoised."""

    record: Any
    status: CanonicalStatus
    tag_state: TagState

    def __getattr__(self, name: str) -> Any:
        # Expose record fields directly (id, name, asset_id, assigned_to, ...)
        if name.startswith("__") or name == "record":
            raise AttributeError(name)
        return getattr(self.record, name)


@dataclass
class DashboardStats:
    total: int = 0
    available: int = 0
    in_use: int = 0
    overdue: int = 0
    repair: int = 0
    expired_tags: int = 0
    due_soon: int = 0
    compliant: int = 0
    no_tag: int = 0
    # (site, assigned item count), busiest first
    site_utilization: list[tuple[str, int]] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "available": self.available,
            "inUse": self.in_use,
            "overdue": self.overdue,
            "repair": self.repair,
            "expiredTags": self.expired_tags,
            "dueSoon": self.due_soon,
            "compliant": self.compliant,
            "noTag": self.no_tag,
            "siteUtilization": [
                {"site": site, "count": count} for site, count in self.site_utilization
            ],
        }


def enrich(record: Any, now: datetime | None = None) -> EnrichedEquipment:
    """Compute status and tag state for one record."""
    if isinstance(record, EnrichedEquipment):
        return record
    return EnrichedEquipment(
        record=record,
        status=compute_status(record, now),
        tag_state=compute_tag_state(record, now),
    )


def enrich_all(records: Iterable[Any], now: datetime | None = None) -> list[EnrichedEquipment]:
    """Enrich a collection against a single shared "now"."""
    now = now or utc_now()
    return [enrich(record, now) for record in records]


def compute_stats(items: Iterable[Any], now: datetime | None = None) -> DashboardStats:
    """
    Roll a collection up into dashboard counters.

    Status buckets are mutually exclusive and always sum to ``total``:
    a canonical status outside the four counted buckets (Expired) is
    counted as available. Tag counters are independent of status and
    also sum to ``total``. Site utilisation counts every item with an
    assigned site, ties kept in first-seen order.
    """
    stats = DashboardStats()
    sites: Counter[str] = Counter()

    for item in enrich_all(items, now):
        stats.total += 1

        if item.status is CanonicalStatus.IN_USE:
            stats.in_use += 1
        elif item.status is CanonicalStatus.OVERDUE:
            stats.overdue += 1
        elif item.status is CanonicalStatus.REPAIR:
            stats.repair += 1
        else:
            stats.available += 1

        if item.tag_state is TagState.EXPIRED:
            stats.expired_tags += 1
        elif item.tag_state is TagState.DUE_SOON:
            stats.due_soon += 1
        elif item.tag_state is TagState.OK:
            stats.compliant += 1
        else:
            stats.no_tag += 1

        site = getattr(item, "assigned_site", "")
        if site:
            sites[site] += 1

    stats.site_utilization = sorted(sites.items(), key=lambda entry: entry[1], reverse=True)
    return stats


def recent_movements(
    movements: Iterable[Any],
    equipment_by_id: Mapping[str, Any],
    limit: int = RECENT_MOVEMENTS_LIMIT,
) -> list[tuple[Any, Any | None]]:
    """
    Pair the first ``limit`` movements with the equipment they refer to.

    Movements are expected newest first. The equipment side is None when
    the item is no longer in the collection.
    """
    pairs = []
    for movement in movements:
        if len(pairs) >= limit:
            break
        pairs.append((movement, equipment_by_id.get(movement.equipment_id)))
    return pairs
