"""
Filter and search over an enriched equipment collection.

Filtering reads the memoised status/tag values and never re-derives
them. Both operations return new lists and leave the source untouched,
so switching buckets or clearing a query always starts from the full
collection again.
"""

from typing import Any, Iterable

from equiptrack.exceptions import ValidationError
from equiptrack.models.enums import CanonicalStatus, FilterBucket, TagState
from equiptrack.services.aggregation import EnrichedEquipment, enrich

SEARCH_FIELDS = ("name", "asset_id", "category", "assigned_to", "assigned_site")

_STATUS_BUCKETS = {
    FilterBucket.AVAILABLE: CanonicalStatus.AVAILABLE,
    FilterBucket.IN_USE: CanonicalStatus.IN_USE,
    FilterBucket.OVERDUE: CanonicalStatus.OVERDUE,
    FilterBucket.REPAIR: CanonicalStatus.REPAIR,
    FilterBucket.MAINTENANCE: CanonicalStatus.REPAIR,
}

_TAG_BUCKETS = {
    FilterBucket.EXPIRED_TAGS: TagState.EXPIRED,
    FilterBucket.DUE_SOON: TagState.DUE_SOON,
}


def parse_bucket(value: str | FilterBucket | None) -> FilterBucket:
    """Resolve a bucket name case-insensitively; empty means All."""
    if isinstance(value, FilterBucket):
        return value
    if value is None or not value.strip():
        return FilterBucket.ALL

    wanted = value.strip().lower()
    for bucket in FilterBucket:
        if bucket.value.lower() == wanted or bucket.name.lower() == wanted:
            return bucket

    choices = ", ".join(b.value for b in FilterBucket)
    raise ValidationError(f"Unknown filter '{value}'. Expected one of: {choices}", fields=["filter"])


def filter_by_bucket(
    items: Iterable[EnrichedEquipment], bucket: FilterBucket | str
) -> list[EnrichedEquipment]:
    """Keep the items whose derived status or tag state matches ``bucket``."""
    bucket = parse_bucket(bucket)
    items = [enrich(item) for item in items]

    if bucket is FilterBucket.ALL:
        return items
    if bucket in _STATUS_BUCKETS:
        wanted_status = _STATUS_BUCKETS[bucket]
        return [item for item in items if item.status is wanted_status]

    wanted_tag = _TAG_BUCKETS[bucket]
    return [item for item in items if item.tag_state is wanted_tag]


def fuzzy_match(text: str | None, query: str) -> bool:
    """
    Case-insensitive match: substring first, then in-order subsequence.

    The subsequence tier tolerates dropped characters ("mkta" finds
    "Makita"). Very short queries will match most records this way.
    """
    lower_text = (text or "").lower()
    lower_query = query.lower()
    if lower_query in lower_text:
        return True

    position = 0
    for char in lower_text:
        if position == len(lower_query):
            break
        if char == lower_query[position]:
            position += 1
    return position == len(lower_query)


def matches_query(item: Any, query: str) -> bool:
    """Check whether any searchable field of ``item`` matches ``query``."""
    return any(fuzzy_match(getattr(item, field, "") or "", query) for field in SEARCH_FIELDS)


def search_records(items: Iterable[Any], query: str | None) -> list[Any]:
    """Narrow ``items`` to those matching a free-text query."""
    items = list(items)
    if query is None or not query.strip():
        return items
    return [item for item in items if matches_query(item, query)]


def apply_view(
    items: Iterable[EnrichedEquipment],
    bucket: FilterBucket | str | None = FilterBucket.ALL,
    query: str | None = None,
) -> list[EnrichedEquipment]:
    """Filter by bucket, then search within the result."""
    return search_records(filter_by_bucket(items, parse_bucket(bucket)), query)
