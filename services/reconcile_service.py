"""
Order reconciliation: merge edited line items into the order payload.

Only edited items are recomputed. Untouched items keep their stored
total_price so values the user never touched cannot drift.

    subtotal = Σ total_price   (edited: recomputed, untouched: stored)
    total    = subtotal        (tax/shipping live at the order level)
"""

from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from config import settings
from config.pricing import ZERO
from models.line_item import LineItem
from models.order import OrderTotalRecalculation, PersistableItem, ReconciledOrder
from services.size_pricing_service import apply_size_aggregate
from services.totals_service import compute_totals
from utils.numeric import round_currency, to_decimal

logger = structlog.get_logger(__name__)

EditValue = Union[LineItem, Mapping[str, Any]]


def _recompute(original: LineItem, edit: EditValue) -> PersistableItem:
    """Validate an edit and build its record with a recomputed total."""
    if isinstance(edit, LineItem):
        item = edit
    else:
        base = original.model_dump()
        if "size_pricing" in edit:
            base.pop("pricing")  # Raw size table replaces the current mode
        item = LineItem.model_validate({**base, **dict(edit)})

    item = apply_size_aggregate(item)
    totals = compute_totals(item)
    return PersistableItem.from_line_item(item, totals.total)


def reconcile(
    original_items: Iterable[LineItem],
    edits: Optional[Mapping[str, EditValue]] = None,
) -> ReconciledOrder:
    """
    Merge pending edits with the untouched items of an order.

    Args:
        original_items: Items as last loaded from the order-items store
        edits: Item id → edited LineItem (or a partial field mapping)

    Returns:
        ReconciledOrder with items in original order, subtotal and total.
        An edit that cannot be recomputed is saved with a 0 total and
        listed in failed_item_ids; the rest of the batch proceeds.
    """
    edits = dict(edits or {})
    records: list[PersistableItem] = []
    failed: list[str] = []
    recomputed = 0
    seen: set[str] = set()

    for original in original_items:
        seen.add(original.id)
        edit = edits.get(original.id)

        if edit is None:
            records.append(PersistableItem.from_line_item(original, original.total_price))
            continue

        try:
            records.append(_recompute(original, edit))
            recomputed += 1
        except (PydanticValidationError, ArithmeticError, TypeError, ValueError) as e:
            logger.warning(
                "reconciliation_partial_failure",
                item_id=original.id,
                error=str(e),
            )
            failed.append(original.id)
            records.append(PersistableItem.from_line_item(original, ZERO))

    orphaned = [item_id for item_id in edits if item_id not in seen]
    if orphaned:
        logger.warning("reconcile_edits_without_item", item_ids=orphaned)

    subtotal = round_currency(sum((r.total_price for r in records), ZERO))

    logger.info(
        "order_reconciled",
        item_count=len(records),
        recomputed=recomputed,
        failed=len(failed),
        subtotal=str(subtotal),
    )

    return ReconciledOrder(
        items=records,
        subtotal=subtotal,
        total=subtotal,
        failed_item_ids=failed,
    )


def recalculate_order_total(
    items: Iterable[LineItem],
    current_total: Any,
    order_id: Optional[str] = None,
    tolerance: Optional[Decimal] = None,
) -> OrderTotalRecalculation:
    """
    Compare a stored order total with the sum of its stored item totals.

    Used by maintenance jobs after item inserts/deletes. Orders without
    items are skipped; drift within the tolerance is not an update.

    Args:
        items: Persisted line items of the order
        current_total: Order total as stored
        order_id: For logging
        tolerance: Allowed drift; defaults to settings.total_drift_tolerance

    Returns:
        OrderTotalRecalculation
    """
    items = list(items)
    current = to_decimal(current_total, "current_total")
    tolerance = settings.total_drift_tolerance if tolerance is None else tolerance

    if not items:
        logger.info("order_total_recalculation_skipped", order_id=order_id, reason="no_items")
        return OrderTotalRecalculation(
            order_id=order_id,
            current_total=current,
            subtotal=current,
            total=current,
            skipped=True,
        )

    subtotal = round_currency(sum((item.total_price for item in items), ZERO))
    needs_update = abs(current - subtotal) > tolerance

    if needs_update:
        logger.info(
            "order_total_drift_detected",
            order_id=order_id,
            current_total=str(current),
            subtotal=str(subtotal),
            item_count=len(items),
        )

    return OrderTotalRecalculation(
        order_id=order_id,
        item_count=len(items),
        subtotal=subtotal,
        total=subtotal,
        current_total=current,
        needs_update=needs_update,
    )
