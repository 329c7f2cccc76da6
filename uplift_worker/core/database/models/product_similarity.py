"""
Product similarity model

Directional product pair scores. Both directions of a pair are stored.
"""

from sqlalchemy import Column, String, Integer, Float, DateTime, Index

from uplift_worker.shared.helpers import now_utc
from .base import BaseModel, ShopMixin
from .enums import SimilaritySource


class ProductSimilarity(BaseModel, ShopMixin):
    """Similarity of product_id2 as a recommendation for product_id1"""

    __tablename__ = "ml_product_similarity"

    product_id1 = Column(String(255), nullable=False)
    product_id2 = Column(String(255), nullable=False)
    co_purchase_score = Column(Float, default=0, nullable=False)
    overall_score = Column(Float, default=0, nullable=False)
    sample_size = Column(Integer, default=0, nullable=False)
    category_score = Column(Float, default=0, nullable=False)
    price_score = Column(Float, default=0, nullable=False)
    co_view_score = Column(Float, default=0, nullable=False)
    source = Column(
        String(50), default=SimilaritySource.CO_PURCHASE.value, nullable=False
    )
    computed_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index(
            "ix_ml_product_similarity_shop_id_pair",
            "shop_id",
            "product_id1",
            "product_id2",
            unique=True,
        ),
        Index(
            "ix_ml_product_similarity_shop_id_product_id1_overall_score",
            "shop_id",
            "product_id1",
            "overall_score",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ProductSimilarity(shop_id={self.shop_id}, "
            f"{self.product_id1}->{self.product_id2}, overall={self.overall_score})>"
        )
