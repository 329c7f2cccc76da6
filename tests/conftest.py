"""
Shared fixtures: a throwaway SQLite database per test and event builders
"""

import json
import uuid
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from uplift_worker.core.database import build_session_factory, create_engine
from uplift_worker.core.database.create_tables import create_all_tables
from uplift_worker.core.database.models import InteractionEvent, ShopSettings

SHOP = "test-shop.myshopify.com"
AS_OF = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'learning.db'}")
    await create_all_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


def make_event(kind, shop_id=SHOP, minutes_ago=60, as_of=AS_OF, metadata=None, **fields):
    """InteractionEvent row created `minutes_ago` before `as_of`"""
    return InteractionEvent(
        id=fields.pop("id", str(uuid.uuid4())),
        shop_id=shop_id,
        kind=kind,
        event_metadata=metadata,
        created_at=as_of - timedelta(minutes=minutes_ago),
        **fields,
    )


def served_event(recommendation_ids, anchors=None, as_json=False, **kwargs):
    metadata = {"recommendationIds": recommendation_ids, "anchors": anchors or []}
    if as_json:
        metadata = json.dumps(metadata)
    return make_event("recommendation_served", metadata=metadata, **kwargs)


def purchase_event(order_id, product_id, **kwargs):
    return make_event("purchase", order_id=order_id, product_id=product_id, **kwargs)


async def add_rows(session_factory, *rows):
    async with session_factory() as session:
        session.add_all(rows)
        await session.commit()


@pytest.fixture
def add(session_factory):
    """Persist rows into the test database"""

    async def _add(*rows):
        await add_rows(session_factory, *rows)

    return _add


@pytest.fixture
def shop_settings():
    def _build(shop_id=SHOP, privacy_level="basic", is_active=True):
        return ShopSettings(
            shop_id=shop_id, ml_privacy_level=privacy_level, is_active=is_active
        )

    return _build
