"""
Margin solver: unit price from a target margin.

Product margin:
    margin = (price - cost) / price   →   price = cost / (1 - margin/100)

Total margin (decoration and charges count as cost, per unit):
    total_cost = cost + decoration + charges
    new_total  = total_cost / (1 - margin/100)
    price      = new_total - decoration - charges

The strict solve_* functions raise MarginUnsolvableError. The price_*
functions back interactive margin fields: an unsolvable target is a
no-op that returns the previous price.
"""

from decimal import Decimal
from typing import Any

import structlog

from config.pricing import PERCENT_BASE, ZERO
from exceptions import MarginUnsolvableError
from utils.numeric import to_decimal, round_currency, round_percent

logger = structlog.get_logger(__name__)

ONE = Decimal("1")


def _markup_divisor(margin: Decimal) -> Decimal:
    """1 - margin/100, rejecting margins of 100% or more."""
    if margin >= PERCENT_BASE:
        raise MarginUnsolvableError(margin, "margin must be below 100%")
    return ONE - margin / PERCENT_BASE


# ===================
# STRICT SOLVERS
# ===================

def solve_price_for_product_margin(cost: Any, margin_percent_value: Any) -> Decimal:
    """
    Unit price that yields the target product margin.

    Args:
        cost: Unit cost
        margin_percent_value: Target margin, e.g. 40 for 40%

    Returns:
        Unit price rounded to cents (half-up)

    Raises:
        MarginUnsolvableError: margin >= 100% or cost <= 0
    """
    cost = to_decimal(cost, "cost")
    margin = round_percent(to_decimal(margin_percent_value, "margin_percent"))

    if cost <= ZERO:
        raise MarginUnsolvableError(margin, "cost must be positive", {"cost": str(cost)})

    return round_currency(cost / _markup_divisor(margin))


def solve_price_for_total_margin(
    cost: Any,
    decoration_amount: Any,
    charges_amount: Any,
    margin_percent_value: Any,
) -> Decimal:
    """
    Unit price that yields the target total margin.

    Args:
        cost: Unit cost
        decoration_amount: Decoration amount per unit
        charges_amount: Charges amount per unit
        margin_percent_value: Target total margin

    Returns:
        Unit price rounded to cents (half-up)

    Raises:
        MarginUnsolvableError: margin >= 100% or resulting price <= 0
    """
    cost = to_decimal(cost, "cost")
    decoration = to_decimal(decoration_amount, "decoration_amount")
    charges = to_decimal(charges_amount, "charges_amount")
    margin = round_percent(to_decimal(margin_percent_value, "margin_percent"))

    total_cost = cost + decoration + charges
    new_total = total_cost / _markup_divisor(margin)
    price = new_total - decoration - charges

    if price <= ZERO:
        raise MarginUnsolvableError(
            margin,
            "resulting unit price is not positive",
            {"total_cost": str(total_cost), "price": str(price)},
        )

    return round_currency(price)


# ===================
# LENIENT SOLVERS
# ===================

def price_from_product_margin(cost: Any, margin_percent_value: Any, previous_price: Any) -> Decimal:
    """
    Unit price for a product margin edit, or previous_price if unsolvable.

    Example: cost 60, margin 40% → 60 / 0.6 = 100.00
    """
    try:
        return solve_price_for_product_margin(cost, margin_percent_value)
    except MarginUnsolvableError as e:
        logger.info("margin_unsolvable", kind="product", **e.details)
        return to_decimal(previous_price, "previous_price")


def price_from_total_margin(
    cost: Any,
    decoration_amount: Any,
    charges_amount: Any,
    margin_percent_value: Any,
    previous_price: Any,
) -> Decimal:
    """Unit price for a total margin edit, or previous_price if unsolvable."""
    try:
        return solve_price_for_total_margin(
            cost, decoration_amount, charges_amount, margin_percent_value
        )
    except MarginUnsolvableError as e:
        logger.info("margin_unsolvable", kind="total", **e.details)
        return to_decimal(previous_price, "previous_price")


def margin_from_price(price: Any, cost: Any) -> Decimal:
    """
    Margin percent for a price and cost, two decimals.

    (price - cost) / price × 100; 0 when price is 0.
    """
    price = to_decimal(price, "price")
    cost = to_decimal(cost, "cost")
    if price == ZERO:
        return round_percent(ZERO)
    return round_percent((price - cost) / price * PERCENT_BASE)
