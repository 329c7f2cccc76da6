import pytest

from uplift_worker.core.exceptions import EventParseError
from uplift_worker.domains.learning.models import (
    ClickEvent,
    PurchaseEvent,
    RecommendationServedEvent,
    parse_event,
)
from uplift_worker.domains.learning.services import EventStoreReader

from tests.conftest import AS_OF, SHOP, make_event, purchase_event, served_event


class TestParseEvent:
    def test_recommendation_served_payload_is_typed(self):
        event = parse_event(served_event(["p1", 2, 3.0], anchors=["a1", "a2"]))

        assert isinstance(event, RecommendationServedEvent)
        assert event.payload.recommendation_ids == ["p1", "2", "3"]
        assert event.anchor == "a1"

    def test_json_string_metadata(self):
        event = parse_event(served_event(["p1"], anchors=["a1"], as_json=True))
        assert event.payload.recommendation_ids == ["p1"]

    def test_legacy_kind_is_normalized(self):
        row = make_event("ml_recommendation_served", metadata={"recommendationIds": ["p1"]})
        event = parse_event(row)
        assert event.kind == "recommendation_served"
        assert event.anchor is None

    def test_plain_kinds(self):
        assert isinstance(parse_event(make_event("click", product_id="p1")), ClickEvent)
        purchase = parse_event(purchase_event("o1", "p1", revenue_cents=1250))
        assert isinstance(purchase, PurchaseEvent)
        assert purchase.price == 12.5

    @pytest.mark.parametrize(
        "metadata",
        ["{not json", '["a", "b"]', {"recommendationIds": "p1"}],
    )
    def test_malformed_metadata_raises_parse_error(self, metadata):
        row = make_event("recommendation_served", metadata=metadata)
        with pytest.raises(EventParseError) as exc_info:
            parse_event(row)
        assert exc_info.value.event_id == row.id

    def test_unknown_kind(self):
        with pytest.raises(EventParseError):
            parse_event(make_event("page_view"))


class TestEventStoreReader:
    @pytest.mark.asyncio
    async def test_window_kinds_and_order(self, session_factory, add):
        await add(
            make_event("click", product_id="p1", minutes_ago=30),
            make_event("click", product_id="p2", minutes_ago=10),
            make_event("impression", product_id="p3", minutes_ago=20),
            make_event("click", product_id="old", minutes_ago=60 * 24 * 40),
            make_event("click", product_id="other", shop_id="other.myshopify.com"),
        )
        reader = EventStoreReader(session_factory)

        stream = await reader.query_events(
            SHOP, ["click"], AS_OF.replace(day=1, month=5), until=AS_OF
        )
        assert [e.product_id for e in stream] == ["p1", "p2"]

        newest = await reader.query_events(
            SHOP, ["click", "impression"], AS_OF.replace(month=5), newest_first=True, limit=2
        )
        assert [e.product_id for e in newest] == ["p2", "p3"]

    @pytest.mark.asyncio
    async def test_malformed_rows_are_skipped_not_fatal(self, session_factory, add):
        bad = make_event("recommendation_served", metadata="{oops")
        await add(served_event(["p1"]), bad)

        stream = await EventStoreReader(session_factory).query_events(
            SHOP, ["recommendation_served"], AS_OF.replace(month=5)
        )

        assert len(stream) == 1
        assert [s.key for s in stream.skipped] == [bad.id]
        assert stream.skipped[0].reason == "malformed_metadata"

    @pytest.mark.asyncio
    async def test_legacy_rows_are_read(self, session_factory, add):
        await add(make_event("ml_recommendation_served", metadata={"recommendationIds": ["p9"]}))
        stream = await EventStoreReader(session_factory).query_events(
            SHOP, ["recommendation_served"], AS_OF.replace(month=5)
        )
        assert stream.events[0].payload.recommendation_ids == ["p9"]
