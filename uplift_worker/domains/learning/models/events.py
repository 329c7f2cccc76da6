"""
Typed interaction events

Rows of the event store are converted into a tagged union keyed by `kind`
so the services never have to inspect raw metadata dictionaries.
"""

import json
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from uplift_worker.core.database.models import InteractionEvent
from uplift_worker.core.exceptions import EventParseError
from uplift_worker.shared.constants import normalize_kind
from uplift_worker.shared.helpers import ensure_utc, normalize_product_id


def _normalize_id_list(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValueError("expected a list of product ids")
    ids = []
    for item in value:
        product_id = normalize_product_id(item)
        if product_id is not None:
            ids.append(product_id)
    return ids


class RecommendationServedPayload(BaseModel):
    """Products shown together in one widget render and what triggered them"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    recommendation_ids: List[str] = Field(default_factory=list, alias="recommendationIds")
    anchors: List[str] = Field(default_factory=list)

    @field_validator("recommendation_ids", "anchors", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> List[str]:
        return _normalize_id_list(value)


class _EventBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    shop_id: str
    session_id: Optional[str] = None
    customer_id: Optional[str] = None
    product_id: Optional[str] = None
    order_id: Optional[str] = None
    revenue_cents: Optional[int] = None
    created_at: datetime

    @field_validator("product_id", mode="before")
    @classmethod
    def _normalize_product(cls, value: Any) -> Optional[str]:
        return normalize_product_id(value)

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class ImpressionEvent(_EventBase):
    kind: Literal["impression"] = "impression"
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ClickEvent(_EventBase):
    kind: Literal["click"] = "click"
    metadata: Dict[str, Any] = Field(default_factory=dict)


class AddToCartEvent(_EventBase):
    kind: Literal["add_to_cart"] = "add_to_cart"
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PurchaseEvent(_EventBase):
    kind: Literal["purchase"] = "purchase"
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def price(self) -> Optional[float]:
        """Purchase price in currency units, when the event carries revenue"""
        if not self.revenue_cents:
            return None
        return self.revenue_cents / 100


class RecommendationServedEvent(_EventBase):
    kind: Literal["recommendation_served"] = "recommendation_served"
    payload: RecommendationServedPayload = Field(default_factory=RecommendationServedPayload)

    @property
    def anchor(self) -> Optional[str]:
        """First anchor product; the others are not used for missed opportunities"""
        return self.payload.anchors[0] if self.payload.anchors else None


Event = Annotated[
    Union[
        ImpressionEvent,
        ClickEvent,
        AddToCartEvent,
        PurchaseEvent,
        RecommendationServedEvent,
    ],
    Field(discriminator="kind"),
]

_event_adapter = TypeAdapter(Event)


def _decode_metadata(raw: Any) -> Dict[str, Any]:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, (str, bytes)):
        raw = json.loads(raw)
    if not isinstance(raw, dict):
        raise ValueError(f"metadata must be an object, got {type(raw).__name__}")
    return raw


def parse_event(row: InteractionEvent) -> Event:
    """
    Convert a stored InteractionEvent row into its typed event model.

    Raises:
        EventParseError: when the kind is unknown or the metadata does not
            fit the kind's payload
    """
    kind = normalize_kind(row.kind)
    try:
        metadata = _decode_metadata(row.event_metadata)
        data = {
            "id": row.id,
            "shop_id": row.shop_id,
            "session_id": row.session_id,
            "customer_id": row.customer_id,
            "product_id": row.product_id,
            "order_id": row.order_id,
            "revenue_cents": row.revenue_cents,
            "created_at": row.created_at,
            "kind": kind,
        }
        if kind == "recommendation_served":
            data["payload"] = metadata
        else:
            data["metadata"] = metadata
        return _event_adapter.validate_python(data)
    except (ValueError, PydanticValidationError) as e:
        # json.JSONDecodeError is a ValueError
        raise EventParseError(
            f"Malformed {kind} event {row.id}: {e}",
            event_id=row.id,
            kind=kind,
            shop_id=row.shop_id,
            cause=e,
        ) from e
