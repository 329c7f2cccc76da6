"""
User profile model

Per-session behavioral profile, shaped by the shop's privacy level.
"""

from sqlalchemy import Column, String, Integer, DateTime, Index, JSON

from uplift_worker.shared.constants import (
    DEFAULT_DATA_RETENTION_DAYS,
    DEFAULT_PRIVACY_LEVEL,
)
from uplift_worker.shared.helpers import now_utc
from .base import BaseModel, ShopMixin, CustomerMixin


class UserProfile(BaseModel, ShopMixin, CustomerMixin):
    """Viewed / carted / purchased product sets for one storefront session"""

    __tablename__ = "ml_user_profiles"

    session_id = Column(String(255), nullable=False)
    anonymous_id = Column(String(255), nullable=True)
    privacy_level = Column(String(20), default=DEFAULT_PRIVACY_LEVEL, nullable=False)
    viewed_products = Column(JSON, default=list, nullable=False)
    carted_products = Column(JSON, default=list, nullable=False)
    purchased_products = Column(JSON, default=list, nullable=False)
    price_range_preference = Column(JSON, nullable=True)
    last_activity = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    data_retention_days = Column(
        Integer, default=DEFAULT_DATA_RETENTION_DAYS, nullable=False
    )
    # bumped on every update; a stale version fails the flush
    version_id = Column(Integer, nullable=False)

    __table_args__ = (
        Index(
            "ix_ml_user_profiles_shop_id_session_id",
            "shop_id",
            "session_id",
            unique=True,
        ),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<UserProfile(shop_id={self.shop_id}, session_id={self.session_id})>"
