"""
Line item totals and margins.

Charges compound on product + decoration, not on product alone:

    product_total    = quantity × unit_price
    decoration_total = decoration% × product_total
    charges_total    = charges% × (product_total + decoration_total)
    total            = product_total + decoration_total + charges_total

Decoration and charges are counted as cost when computing total margin,
i.e. they carry no margin of their own. This is the current business
rule; it is kept as-is pending product-owner confirmation.
"""

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from config.pricing import PERCENT_BASE, ZERO
from models.line_item import LineItem, OrderTotals
from models.order import OrderSummary
from utils.numeric import round_currency, round_percent

logger = structlog.get_logger(__name__)


def margin_percent(revenue: Decimal, cost: Decimal) -> Decimal:
    """(revenue - cost) / revenue × 100, or 0 when revenue is not positive."""
    if revenue <= ZERO:
        return ZERO
    return (revenue - cost) / revenue * PERCENT_BASE


def factory_quantity(quantity: int, uom_factor: Optional[int]) -> int:
    """
    Purchase packs needed for a quantity.

    140 units at 12 per case = ceil(140/12) = 12 cases.
    Without a positive factor the unit count is returned unchanged.
    """
    if uom_factor and uom_factor > 0:
        return -(-quantity // uom_factor)  # Ceiling division
    return quantity


def compute_totals(item: LineItem) -> OrderTotals:
    """
    Compute totals and margins for one line item.

    Pure and total: the item's numeric fields are already coerced, and
    every ratio with a zero denominator yields 0.

    Args:
        item: Line item snapshot

    Returns:
        OrderTotals at full precision
    """
    quantity = Decimal(item.quantity)

    product_total = quantity * item.unit_price
    decoration_total = item.decoration_percent / PERCENT_BASE * product_total
    subtotal_after_decoration = product_total + decoration_total
    charges_total = item.charges_percent / PERCENT_BASE * subtotal_after_decoration
    total = product_total + decoration_total + charges_total

    product_cost_total = item.cost * quantity
    total_cost = product_cost_total + decoration_total + charges_total

    return OrderTotals(
        product_total=product_total,
        decoration_total=decoration_total,
        charges_total=charges_total,
        total=total,
        product_cost_total=product_cost_total,
        total_cost=total_cost,
        product_margin_percent=margin_percent(product_total, product_cost_total),
        total_margin_percent=margin_percent(total, total_cost),
        factory_quantity=factory_quantity(item.quantity, item.uom_factor),
    )


def summarize_order(items: Iterable[LineItem]) -> OrderSummary:
    """
    Order-wide totals and margins.

    Sums per-item totals, then derives margins from the sums so large
    lines weigh more than small ones.

    Args:
        items: All line items of the order

    Returns:
        OrderSummary with money rounded to cents
    """
    count = 0
    product_total = decoration_total = charges_total = total = ZERO
    product_cost_total = total_cost = ZERO
    packs = 0

    for item in items:
        totals = compute_totals(item)
        count += 1
        product_total += totals.product_total
        decoration_total += totals.decoration_total
        charges_total += totals.charges_total
        total += totals.total
        product_cost_total += totals.product_cost_total
        total_cost += totals.total_cost
        packs += totals.factory_quantity

    summary = OrderSummary(
        item_count=count,
        product_total=round_currency(product_total),
        decoration_total=round_currency(decoration_total),
        charges_total=round_currency(charges_total),
        total=round_currency(total),
        product_cost_total=round_currency(product_cost_total),
        total_cost=round_currency(total_cost),
        product_margin_percent=round_percent(margin_percent(product_total, product_cost_total)),
        total_margin_percent=round_percent(margin_percent(total, total_cost)),
        factory_quantity=packs,
    )

    logger.debug(
        "order_summarized",
        item_count=count,
        total=str(summary.total),
        total_margin_percent=str(summary.total_margin_percent),
    )
    return summary
