"""
Shop settings model
"""

from sqlalchemy import Column, String, Boolean

from uplift_worker.shared.constants import DEFAULT_PRIVACY_LEVEL
from .base import BaseModel


class ShopSettings(BaseModel):
    """Per-shop learning configuration"""

    __tablename__ = "shop_settings"

    shop_id = Column(String(255), nullable=False, unique=True, index=True)
    ml_privacy_level = Column(
        String(20), default=DEFAULT_PRIVACY_LEVEL, nullable=False
    )
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<ShopSettings(shop_id={self.shop_id}, privacy={self.ml_privacy_level})>"
