"""Tests for bucket filtering and fuzzy search."""

from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest

from equiptrack.exceptions import ValidationError
from equiptrack.models.enums import CanonicalStatus, FilterBucket, TagState
from equiptrack.services.aggregation import enrich_all
from equiptrack.services.search import (
    apply_view,
    filter_by_bucket,
    fuzzy_match,
    parse_bucket,
    search_records,
)

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def item(**fields):
    values = {
        "id": fields.get("asset_id", "x"),
        "asset_id": "TT-0000",
        "name": "Item",
        "category": "General",
        "assigned_to": "",
        "assigned_site": "",
        "current_status": "Available",
        "expected_return_date": None,
        "test_tag_next_due": None,
        "tag_threshold_days": 30,
    }
    values.update(fields)
    return SimpleNamespace(**values)


@pytest.fixture
def items():
    return enrich_all(
        [
            item(asset_id="TT-0001", name="Makita Drill", category="Power Tools",
                 test_tag_next_due=date(2025, 6, 1)),
            item(asset_id="TT-0002", name="Circular Saw", category="Cutting Equipment",
                 current_status="In Use", assigned_to="Jane Smith",
                 assigned_site="Riverside Tower", expected_return_date=date(2024, 12, 20),
                 test_tag_next_due=date(2025, 1, 10)),
            item(asset_id="TT-0003", name="Laser Level", category="Survey Equipment",
                 current_status="Repair", test_tag_next_due=date(2024, 11, 30)),
            item(asset_id="TT-0004", name="Plate Compactor", category="Compaction",
                 current_status="In Use", assigned_to="Bob Lee", assigned_site="Harbour Rd",
                 expected_return_date=date(2025, 3, 1)),
        ],
        NOW,
    )


def asset_ids(result):
    return [i.asset_id for i in result]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("In Use", FilterBucket.IN_USE),
        ("in use", FilterBucket.IN_USE),
        ("IN_USE", FilterBucket.IN_USE),
        ("expired tags", FilterBucket.EXPIRED_TAGS),
        ("", FilterBucket.ALL),
        (None, FilterBucket.ALL),
        (FilterBucket.REPAIR, FilterBucket.REPAIR),
    ],
)
def test_parse_bucket(raw, expected):
    assert parse_bucket(raw) is expected


def test_parse_unknown_bucket_fails():
    with pytest.raises(ValidationError) as exc_info:
        parse_bucket("Stolen")
    assert exc_info.value.fields == ["filter"]


def test_all_bucket_returns_everything(items):
    assert asset_ids(filter_by_bucket(items, FilterBucket.ALL)) == [
        "TT-0001", "TT-0002", "TT-0003", "TT-0004",
    ]


def test_status_buckets(items):
    assert asset_ids(filter_by_bucket(items, "Available")) == ["TT-0001"]
    assert asset_ids(filter_by_bucket(items, "In Use")) == ["TT-0004"]
    assert asset_ids(filter_by_bucket(items, "Overdue")) == ["TT-0002"]
    assert asset_ids(filter_by_bucket(items, "Repair")) == ["TT-0003"]


def test_maintenance_bucket_matches_repair(items):
    assert asset_ids(filter_by_bucket(items, "Maintenance")) == ["TT-0003"]


def test_tag_buckets(items):
    assert asset_ids(filter_by_bucket(items, "Expired Tags")) == ["TT-0003"]
    assert asset_ids(filter_by_bucket(items, "Due Soon")) == ["TT-0002"]


def test_filter_leaves_source_untouched(items):
    before = list(items)
    filter_by_bucket(items, "Repair")
    assert items == before


def test_fuzzy_match_tiers():
    assert fuzzy_match("Makita Drill", "drill")
    assert fuzzy_match("Makita Drill", "MAKITA")
    assert fuzzy_match("Makita Drill", "mkta")
    assert not fuzzy_match("Makita Drill", "xyz")
    assert not fuzzy_match(None, "a")


def test_search_matches_any_field(items):
    assert asset_ids(search_records(items, "riverside")) == ["TT-0002"]
    assert asset_ids(search_records(items, "tt-0003")) == ["TT-0003"]
    assert asset_ids(search_records(items, "compaction")) == ["TT-0004"]
    assert asset_ids(search_records(items, "bob")) == ["TT-0004"]


def test_blank_query_returns_all(items):
    assert len(search_records(items, "")) == 4
    assert len(search_records(items, "   ")) == 4
    assert len(search_records(items, None)) == 4


def test_apply_view_filters_then_searches(items):
    assert asset_ids(apply_view(items, "In Use", "bob")) == ["TT-0004"]
    assert apply_view(items, "In Use", "jane") == []
    assert asset_ids(apply_view(items, None, "saw")) == ["TT-0002"]


@pytest.mark.parametrize("query", ["drill", "mkta", "tower", "e", "zzz"])
def test_search_is_idempotent(items, query):
    once = search_records(items, query)
    assert search_records(once, query) == once


@pytest.mark.parametrize(
    "bucket, attribute, expected",
    [
        ("Available", "status", CanonicalStatus.AVAILABLE),
        ("In Use", "status", CanonicalStatus.IN_USE),
        ("Overdue", "status", CanonicalStatus.OVERDUE),
        ("Repair", "status", CanonicalStatus.REPAIR),
        ("Maintenance", "status", CanonicalStatus.REPAIR),
        ("Expired Tags", "tag_state", TagState.EXPIRED),
        ("Due Soon", "tag_state", TagState.DUE_SOON),
    ],
)
def test_bucket_result_is_matching_subset(items, bucket, attribute, expected):
    result = filter_by_bucket(items, bucket)
    assert all(entry in items for entry in result)
    assert all(getattr(entry, attribute) is expected for entry in result)
    assert len(result) == sum(1 for entry in items if getattr(entry, attribute) is expected)
