"""
Recommendation attribution model

Links a purchased order line to the recommendation events that surfaced it.
Rows are immutable once written.
"""

from sqlalchemy import Column, String, Integer, Numeric, Index, JSON

from .base import BaseModel, ShopMixin, CustomerMixin


class RecommendationAttribution(BaseModel, ShopMixin, CustomerMixin):
    """Attribution of one purchased product to served recommendations"""

    __tablename__ = "recommendation_attributions"

    order_id = Column(String(255), nullable=False)
    order_number = Column(String(100), nullable=True)
    product_id = Column(String(255), nullable=False)
    order_value = Column(Numeric(12, 2), default=0, nullable=False)
    recommendation_event_ids = Column(JSON, default=list, nullable=False)
    attributed_revenue = Column(Numeric(12, 2), default=0, nullable=False)
    conversion_time_minutes = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index(
            "ix_recommendation_attributions_shop_id_order_id_product_id",
            "shop_id",
            "order_id",
            "product_id",
            unique=True,
        ),
        Index(
            "ix_recommendation_attributions_shop_id_created_at",
            "shop_id",
            "created_at",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<RecommendationAttribution(shop_id={self.shop_id}, "
            f"order_id={self.order_id}, product_id={self.product_id})>"
        )
