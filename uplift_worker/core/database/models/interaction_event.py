"""
Interaction event model

Storefront events written by the serving layer. The learning pipeline only
reads from this table.
"""

from sqlalchemy import Column, String, Integer, DateTime, Index, JSON

from uplift_worker.shared.helpers import now_utc
from .base import BaseModel, ShopMixin, CustomerMixin, ProductMixin, SessionMixin


class InteractionEvent(
    BaseModel, ShopMixin, SessionMixin, CustomerMixin, ProductMixin
):
    """Single storefront interaction (impression, click, purchase, ...)"""

    __tablename__ = "interaction_events"

    kind = Column(String(50), nullable=False, index=True)
    order_id = Column(String(255), nullable=True, index=True)
    revenue_cents = Column(Integer, nullable=True)
    # JSON object, or a JSON-encoded string from older widget builds
    event_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(
        "created_at", DateTime(timezone=True), default=now_utc, nullable=False
    )

    __table_args__ = (
        Index("ix_interaction_events_shop_id_kind_created_at", "shop_id", "kind", "created_at"),
        Index("ix_interaction_events_shop_id_created_at", "shop_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<InteractionEvent(shop_id={self.shop_id}, kind={self.kind}, id={self.id})>"
