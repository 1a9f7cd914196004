"""
Pricing engine services.

Each module handles one calculation area; all are pure except the
EditSession boundary object.
"""

from services.totals_service import compute_totals, summarize_order, factory_quantity
from services.margin_service import (
    price_from_product_margin,
    price_from_total_margin,
    margin_from_price,
    solve_price_for_product_margin,
    solve_price_for_total_margin,
)
from services.size_pricing_service import (
    aggregate,
    apply_size_aggregate,
    update_size_bucket,
    pricing_mode_for_supplier,
)
from services.reconcile_service import reconcile, recalculate_order_total
from services.edit_session_service import EditSession

__all__ = [
    "compute_totals",
    "summarize_order",
    "factory_quantity",
    "price_from_product_margin",
    "price_from_total_margin",
    "margin_from_price",
    "solve_price_for_product_margin",
    "solve_price_for_total_margin",
    "aggregate",
    "apply_size_aggregate",
    "update_size_bucket",
    "pricing_mode_for_supplier",
    "reconcile",
    "recalculate_order_total",
    "EditSession",
]
