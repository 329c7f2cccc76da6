"""
Product performance model

Per-product recommendation performance, overwritten by the daily learning job.
"""

from sqlalchemy import Column, String, Integer, Float, Boolean, Numeric, DateTime, Index

from uplift_worker.shared.helpers import now_utc
from .base import BaseModel, ShopMixin


class ProductPerformance(BaseModel, ShopMixin):
    """Recommendation funnel metrics for one product in one shop"""

    __tablename__ = "ml_product_performance"

    product_id = Column(String(255), nullable=False)
    impressions = Column(Integer, default=0, nullable=False)
    clicks = Column(Integer, default=0, nullable=False)
    purchases = Column(Integer, default=0, nullable=False)
    revenue = Column(Numeric(12, 2), default=0, nullable=False)
    ctr = Column(Float, default=0, nullable=False)
    cvr = Column(Float, default=0, nullable=False)
    confidence = Column(Float, default=0, nullable=False)
    is_blacklisted = Column(Boolean, default=False, nullable=False)
    blacklist_reason = Column(String(50), nullable=True)
    last_updated = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index(
            "ix_ml_product_performance_shop_id_product_id",
            "shop_id",
            "product_id",
            unique=True,
        ),
    )

    def __repr__(self) -> str:
        return f"<ProductPerformance(shop_id={self.shop_id}, product_id={self.product_id})>"
