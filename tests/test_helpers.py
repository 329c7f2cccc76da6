from datetime import datetime, timedelta, timezone

import pytest

from uplift_worker.shared.constants import normalize_kind, stored_kind_names
from uplift_worker.shared.helpers import (
    contains_product_id,
    ensure_utc,
    minutes_between,
    normalize_product_id,
    parse_iso_timestamp,
    product_ids_match,
)


class TestProductIds:
    @pytest.mark.parametrize(
        "left,right",
        [("123", 123), ("123", "123"), (123, 123.0), ("gid://shopify/Product/123", "123")],
    )
    def test_matching_ids(self, left, right):
        assert product_ids_match(left, right)

    @pytest.mark.parametrize("left,right", [("123", "124"), ("abc", "ABC"), (None, None), ("1", True)])
    def test_non_matching_ids(self, left, right):
        assert not product_ids_match(left, right)

    def test_normalize(self):
        assert normalize_product_id(123.0) == "123"
        assert normalize_product_id("  p1 ") == "p1"
        assert normalize_product_id("") is None
        assert normalize_product_id(False) is None

    def test_contains_product_id(self):
        assert contains_product_id(["p1", 123], "123")
        assert not contains_product_id([], "123")


class TestDatetimes:
    def test_parse_iso_timestamp_with_z(self):
        parsed = parse_iso_timestamp("2024-01-15T10:30:00Z")
        assert parsed == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_parse_iso_timestamp_invalid(self):
        assert parse_iso_timestamp("yesterday") is None

    def test_naive_is_treated_as_utc(self):
        assert ensure_utc(datetime(2024, 1, 1)).tzinfo == timezone.utc

    def test_minutes_between_floors_and_clamps(self):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert minutes_between(start, start + timedelta(minutes=90, seconds=59)) == 90
        assert minutes_between(start, start - timedelta(minutes=5)) == 0


def test_legacy_kind_names():
    assert normalize_kind("ml_recommendation_served") == "recommendation_served"
    assert normalize_kind("Click") == "click"
    assert "ml_recommendation_served" in stored_kind_names("recommendation_served")
    assert stored_kind_names("click") == ["click"]
