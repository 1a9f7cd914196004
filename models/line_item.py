"""
Line item schemas for the pricing engine.

A LineItem is an immutable snapshot of one product line in an order.
Numeric fields are coerced on the way in (see utils.numeric), so a
malformed form value becomes 0 instead of a validation failure.
"""

from pydantic import Field, field_validator, model_validator
from typing import Annotated, Any, Literal, Optional, Union
from decimal import Decimal

from config.pricing import ZERO
from models.base import FrozenSchema
from utils.numeric import (
    to_decimal,
    to_money,
    to_optional_int,
    to_quantity,
    round_currency,
    round_percent,
)


# ===================
# PRICING MODES
# ===================

class SizeBucket(FrozenSchema):
    """Cost, sell price and quantity for one garment size."""

    cost: Decimal = Field(default=ZERO, description="Unit cost for this size")
    price: Decimal = Field(default=ZERO, description="Unit sell price for this size")
    quantity: int = Field(default=0, ge=0, description="Units ordered in this size")

    @field_validator("cost", "price", mode="before")
    @classmethod
    def coerce_amount(cls, v, info):
        return to_money(v, info.field_name)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v, info):
        return to_quantity(v, info.field_name)


class SimplePricing(FrozenSchema):
    """Single blended unit price; quantity/unit_price/cost are edited directly."""

    mode: Literal["simple"] = "simple"


class BySizePricing(FrozenSchema):
    """
    Per-size pricing used by apparel suppliers.

    Quantity, unit price and cost on the line item are weighted
    aggregates of these buckets.
    """

    mode: Literal["by_size"] = "by_size"
    sizes: dict[str, SizeBucket] = Field(
        default_factory=dict,
        description="Size label (S, M, XL...) to bucket"
    )

    @field_validator("sizes", mode="before")
    @classmethod
    def fill_missing_buckets(cls, v):
        if not v:
            return {}
        return {str(label): (bucket if bucket is not None else {}) for label, bucket in v.items()}


PricingMode = Annotated[
    Union[SimplePricing, BySizePricing],
    Field(discriminator="mode")
]


# ===================
# LINE ITEM
# ===================

class LineItem(FrozenSchema):
    """
    One product line within an order.

    Accepts the raw order-item record shape as well: a `size_pricing`
    mapping is turned into the by-size pricing mode.
    """

    id: str = Field(..., min_length=1, description="Line item id, stable across edits")
    product_id: Optional[str] = Field(None, description="Catalog product reference")
    supplier_id: Optional[str] = Field(None, description="Supplier reference")

    quantity: int = Field(default=0, ge=0, description="Units ordered")
    unit_price: Decimal = Field(default=ZERO, description="Sell price per unit")
    cost: Decimal = Field(default=ZERO, description="Landed cost per unit")
    decoration_percent: Decimal = Field(default=ZERO, description="Markup on product total")
    charges_percent: Decimal = Field(default=ZERO, description="Surcharge on product + decoration")
    uom_factor: Optional[int] = Field(None, description="Units per purchase pack")

    pricing: PricingMode = Field(default_factory=SimplePricing)

    total_price: Decimal = Field(default=ZERO, description="Last persisted line total")

    color: Optional[str] = None
    size: Optional[str] = None
    imprint_location: Optional[str] = None
    imprint_method: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def accept_size_pricing_record(cls, data: Any) -> Any:
        if isinstance(data, dict) and "size_pricing" in data:
            data = dict(data)
            sizes = data.pop("size_pricing")
            if "pricing" not in data:
                data["pricing"] = (
                    {"mode": "by_size", "sizes": sizes} if sizes else {"mode": "simple"}
                )
        return data

    @field_validator("id", "product_id", "supplier_id", mode="before")
    @classmethod
    def coerce_identifier(cls, v):
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v, info):
        return to_quantity(v, info.field_name)

    @field_validator("unit_price", "cost", mode="before")
    @classmethod
    def coerce_amount(cls, v, info):
        return to_money(v, info.field_name)

    @field_validator("total_price", mode="before")
    @classmethod
    def coerce_total(cls, v, info):
        return to_decimal(v, info.field_name)

    @field_validator("decoration_percent", "charges_percent", mode="before")
    @classmethod
    def coerce_percent(cls, v, info):
        return round_percent(to_decimal(v, info.field_name))

    @field_validator("uom_factor", mode="before")
    @classmethod
    def coerce_uom_factor(cls, v, info):
        return to_optional_int(v, info.field_name)

    @property
    def is_size_priced(self) -> bool:
        """True when per-size buckets are authoritative."""
        return isinstance(self.pricing, BySizePricing) and bool(self.pricing.sizes)

    @property
    def size_pricing(self) -> Optional[dict[str, SizeBucket]]:
        """Size buckets, or None for simple pricing."""
        if self.is_size_priced:
            return dict(self.pricing.sizes)
        return None


# ===================
# COMPUTED VALUES
# ===================

class SizeAggregate(FrozenSchema):
    """Quantity-weighted collapse of a size pricing table."""

    quantity: int = Field(default=0, description="Sum of bucket quantities")
    unit_price: Decimal = Field(default=ZERO, description="Weighted average sell price")
    cost: Decimal = Field(default=ZERO, description="Weighted average cost")


class OrderTotals(FrozenSchema):
    """
    Totals and margins for one line item.

    Full Decimal precision; call rounded() for display or persistence.
    """

    product_total: Decimal = ZERO
    decoration_total: Decimal = ZERO
    charges_total: Decimal = ZERO
    total: Decimal = ZERO
    product_cost_total: Decimal = ZERO
    total_cost: Decimal = ZERO
    product_margin_percent: Decimal = ZERO
    total_margin_percent: Decimal = ZERO
    factory_quantity: int = 0

    def rounded(self) -> "OrderTotals":
        """Money to cents, percentages to two decimals."""
        return self.model_copy(update={
            "product_total": round_currency(self.product_total),
            "decoration_total": round_currency(self.decoration_total),
            "charges_total": round_currency(self.charges_total),
            "total": round_currency(self.total),
            "product_cost_total": round_currency(self.product_cost_total),
            "total_cost": round_currency(self.total_cost),
            "product_margin_percent": round_percent(self.product_margin_percent),
            "total_margin_percent": round_percent(self.total_margin_percent),
        })
