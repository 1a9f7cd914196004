"""
Size pricing for apparel suppliers that quote per garment size.

A by-size line item keeps one bucket per size; its quantity, unit price
and cost are quantity-weighted aggregates of the buckets:

    quantity   = Σ quantity[s]
    unit_price = Σ price[s] × quantity[s] / quantity
    cost       = Σ cost[s] × quantity[s] / quantity

Example: S {cost 5, price 10, qty 2}, M {cost 6, price 12, qty 8}
    → quantity 10, unit_price 11.6, cost 5.8
"""

from decimal import Decimal
from typing import Any, Mapping, Optional

import structlog

from config import settings
from config.pricing import SIZE_BUCKET_FIELDS, ZERO
from exceptions import UnknownSizeFieldError
from models.line_item import (
    BySizePricing,
    LineItem,
    PricingMode,
    SimplePricing,
    SizeAggregate,
    SizeBucket,
)
from utils.numeric import to_money, to_quantity
from utils.text_utils import uses_size_pricing

logger = structlog.get_logger(__name__)


def _as_bucket(bucket: Any) -> SizeBucket:
    """Missing or partial entries count as zeros."""
    if isinstance(bucket, SizeBucket):
        return bucket
    if not bucket:
        return SizeBucket()
    return SizeBucket.model_validate(bucket)


def aggregate(size_pricing: Optional[Mapping[str, Any]]) -> SizeAggregate:
    """
    Collapse a size pricing table into one weighted quantity/price/cost.

    Args:
        size_pricing: Size label to bucket (SizeBucket or raw dict)

    Returns:
        SizeAggregate; all zeros when there is no quantity
    """
    total_quantity = 0
    total_price_amount = ZERO
    total_cost_amount = ZERO

    for bucket in (size_pricing or {}).values():
        bucket = _as_bucket(bucket)
        total_quantity += bucket.quantity
        total_price_amount += bucket.price * bucket.quantity
        total_cost_amount += bucket.cost * bucket.quantity

    if total_quantity <= 0:
        return SizeAggregate(quantity=0, unit_price=ZERO, cost=ZERO)

    divisor = Decimal(total_quantity)
    return SizeAggregate(
        quantity=total_quantity,
        unit_price=total_price_amount / divisor,
        cost=total_cost_amount / divisor,
    )


def apply_size_aggregate(item: LineItem) -> LineItem:
    """
    Copy of the item with quantity/unit_price/cost derived from its sizes.

    Simple-priced items are returned unchanged.
    """
    if not item.is_size_priced:
        return item

    result = aggregate(item.pricing.sizes)
    return item.model_copy(update={
        "quantity": result.quantity,
        "unit_price": result.unit_price,
        "cost": result.cost,
    })


def update_size_bucket(item: LineItem, size: str, field: str, value: Any) -> LineItem:
    """
    Edit one column of one size bucket and re-aggregate the item.

    The bucket is created if the size is not in the table yet. A simple
    priced item switches to by-size pricing with this single bucket.

    Args:
        item: Line item snapshot
        size: Size label ("S", "XL", ...)
        field: "cost", "price" or "quantity"
        value: Raw edit value (coerced; malformed → 0)

    Returns:
        New LineItem with updated buckets and aggregates

    Raises:
        UnknownSizeFieldError: field is not a bucket column
    """
    if field not in SIZE_BUCKET_FIELDS:
        raise UnknownSizeFieldError(field, SIZE_BUCKET_FIELDS)

    coerced = to_quantity(value, field) if field == "quantity" else to_money(value, field)

    sizes = dict(item.pricing.sizes) if isinstance(item.pricing, BySizePricing) else {}
    bucket = _as_bucket(sizes.get(size))
    sizes[size] = bucket.model_copy(update={field: coerced})

    updated = item.model_copy(update={"pricing": BySizePricing(sizes=sizes)})

    logger.debug(
        "size_bucket_updated",
        item_id=item.id,
        size=size,
        field=field,
        value=str(coerced),
    )
    return apply_size_aggregate(updated)


def pricing_mode_for_supplier(
    supplier_name: Optional[str],
    sizes: Optional[Mapping[str, Any]] = None,
    suppliers: Optional[list[str]] = None,
) -> PricingMode:
    """
    Pick the pricing mode for a new line item from its supplier.

    Called by the host application when a product is added; the engine
    itself only ever looks at the explicit mode on the item.

    Args:
        supplier_name: Supplier display name
        sizes: Initial size buckets, if already known
        suppliers: Supplier fragments; defaults to settings.size_pricing_suppliers

    Returns:
        BySizePricing for size-pricing suppliers, else SimplePricing
    """
    fragments = suppliers if suppliers is not None else settings.size_pricing_suppliers

    if uses_size_pricing(supplier_name, fragments):
        return BySizePricing(sizes={label: _as_bucket(b) for label, b in (sizes or {}).items()})
    return SimplePricing()
