"""
Shopify orders/create webhook payload

Only the fields attribution needs are modelled; everything else is ignored.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from uplift_worker.shared.helpers import ensure_utc, normalize_product_id


class OrderCustomer(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


class LineItem(BaseModel):
    """One order line"""

    model_config = ConfigDict(extra="ignore")

    product_id: Optional[str] = None
    price: Decimal = Decimal("0")
    quantity: int = 1

    @field_validator("product_id", mode="before")
    @classmethod
    def _normalize_product(cls, value: Any) -> Optional[str]:
        return normalize_product_id(value)

    @field_validator("price", mode="before")
    @classmethod
    def _default_price(cls, value: Any) -> Any:
        return "0" if value in (None, "") else value

    @field_validator("quantity", mode="before")
    @classmethod
    def _default_quantity(cls, value: Any) -> Any:
        return 1 if value in (None, "", 0) else value

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class OrderPayload(BaseModel):
    """Body of the Shopify orders/create webhook"""

    model_config = ConfigDict(extra="ignore")

    id: str
    order_number: Optional[str] = None
    number: Optional[str] = None
    total_price: Decimal = Decimal("0")
    customer: Optional[OrderCustomer] = None
    line_items: List[LineItem] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @field_validator("id", "order_number", "number", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("total_price", mode="before")
    @classmethod
    def _default_total(cls, value: Any) -> Any:
        return "0" if value in (None, "") else value

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @property
    def display_number(self) -> Optional[str]:
        return self.order_number or self.number

    @property
    def customer_id(self) -> Optional[str]:
        return self.customer.id if self.customer else None

    def purchased_product_ids(self) -> List[str]:
        """Distinct product ids of the order's line items, in line order"""
        seen = []
        for item in self.line_items:
            if item.product_id is not None and item.product_id not in seen:
                seen.append(item.product_id)
        return seen

    def revenue_for(self, product_id: str) -> Decimal:
        """price x quantity of the first line carrying the product, 0 when absent"""
        for item in self.line_items:
            if item.product_id == product_id:
                return item.line_total
        return Decimal("0")
