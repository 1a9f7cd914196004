"""
Order-level schemas: reconciliation payloads and summaries.
"""

from pydantic import Field
from typing import Optional
from decimal import Decimal

from config.pricing import ZERO
from models.base import BaseSchema, FrozenSchema
from models.line_item import LineItem, SizeBucket
from utils.numeric import round_currency


class PersistableItem(FrozenSchema):
    """
    Line item in the shape written back to the order-items store.

    Money fields are rounded to cents; size buckets are flattened back
    to the raw `size_pricing` mapping.
    """

    id: str
    product_id: Optional[str] = None
    supplier_id: Optional[str] = None
    quantity: int = 0
    unit_price: Decimal = ZERO
    cost: Decimal = ZERO
    decoration_percent: Decimal = ZERO
    charges_percent: Decimal = ZERO
    uom_factor: Optional[int] = None
    size_pricing: Optional[dict[str, SizeBucket]] = None
    total_price: Decimal = Field(default=ZERO, description="Line total, cents")

    @classmethod
    def from_line_item(cls, item: LineItem, total_price: Decimal) -> "PersistableItem":
        """Build the persisted record for an item with the given line total."""
        return cls(
            id=item.id,
            product_id=item.product_id,
            supplier_id=item.supplier_id,
            quantity=item.quantity,
            unit_price=round_currency(item.unit_price),
            cost=round_currency(item.cost),
            decoration_percent=item.decoration_percent,
            charges_percent=item.charges_percent,
            uom_factor=item.uom_factor,
            size_pricing=item.size_pricing,
            total_price=round_currency(total_price),
        )


class ReconciledOrder(FrozenSchema):
    """Result of merging edits into an order, ready to persist."""

    items: list[PersistableItem] = Field(default_factory=list)
    subtotal: Decimal = ZERO
    total: Decimal = ZERO
    failed_item_ids: list[str] = Field(
        default_factory=list,
        description="Edited items whose total degraded to 0"
    )

    @property
    def is_partial(self) -> bool:
        """True when at least one edited item could not be recomputed."""
        return bool(self.failed_item_ids)

    def to_payload(self) -> dict:
        """JSON-ready body for the order update endpoint."""
        return self.model_dump(mode="json", include={"items", "subtotal", "total"})


class OrderSummary(BaseSchema):
    """Order-wide totals and margins across all line items."""

    item_count: int = 0
    product_total: Decimal = ZERO
    decoration_total: Decimal = ZERO
    charges_total: Decimal = ZERO
    total: Decimal = ZERO
    product_cost_total: Decimal = ZERO
    total_cost: Decimal = ZERO
    product_margin_percent: Decimal = ZERO
    total_margin_percent: Decimal = ZERO
    factory_quantity: int = 0


class OrderTotalRecalculation(BaseSchema):
    """Stored order total compared against the sum of its stored items."""

    order_id: Optional[str] = None
    item_count: int = 0
    subtotal: Decimal = ZERO
    total: Decimal = ZERO
    current_total: Decimal = ZERO
    needs_update: bool = Field(default=False, description="Drift exceeds tolerance")
    skipped: bool = Field(default=False, description="Order has no items")
