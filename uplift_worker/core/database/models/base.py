"""
Declarative base and column mixins shared by the learning tables
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import Column, DateTime, MetaData, String
from sqlalchemy.orm import declarative_base, declared_attr

from uplift_worker.shared.helpers import ensure_utc, now_utc

# stable constraint names so migrations can target them
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_N_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "pk": "pk_%(table_name)s",
}

Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))


def new_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False
    )


class IDMixin:
    @declared_attr
    def id(cls):
        return Column(String(36), primary_key=True, default=new_id)


class BaseModel(Base, IDMixin, TimestampMixin):
    """String uuid primary key plus created/updated timestamps"""

    __abstract__ = True

    def to_dict(self) -> Dict[str, Any]:
        """Column values in JSON-safe form (UTC ISO datetimes, Decimals as strings)"""
        data = {}
        for column in self.__mapper__.column_attrs:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = ensure_utc(value).isoformat()
            elif isinstance(value, Decimal):
                value = str(value)
            data[column.key] = value
        return data

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"


class ShopMixin:
    """Rows are partitioned by shop domain"""

    shop_id = Column(String(255), nullable=False, index=True)


class CustomerMixin:
    customer_id = Column(String(255), nullable=True, index=True)


class ProductMixin:
    product_id = Column(String(255), nullable=True, index=True)


class SessionMixin:
    """Storefront session the row was recorded in"""

    session_id = Column(String(255), nullable=True, index=True)
