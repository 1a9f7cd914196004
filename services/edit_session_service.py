"""
Edit session for one order's line-item editor.

Holds pending (edited) line items until save. Owned by the host
application, one per order being edited:

    CLEAN → DIRTY        first field edit
    DIRTY → SAVING       begin_save() reconciles the pending edits
    SAVING → CLEAN       mark_saved(): pending edits cleared
    SAVING → DIRTY       mark_failed(): pending edits kept for retry

Edits are last-write-wins per field: each edit starts from the pending
version of the item, if any, so earlier edits to other fields survive.
"""

from typing import Any, Callable, Iterable, Optional

import structlog

from config.pricing import PERCENT_BASE
from exceptions import (
    DerivedFieldEditError,
    InvalidStatusTransitionError,
    OrderSaveError,
    UnknownPercentFieldError,
)
from models.edit_session import EditSessionState, is_valid_session_transition
from models.line_item import LineItem
from models.order import ReconciledOrder
from services.margin_service import price_from_product_margin, price_from_total_margin
from services.reconcile_service import reconcile
from services.size_pricing_service import apply_size_aggregate, update_size_bucket

logger = structlog.get_logger(__name__)

# Derived from size buckets when an item is priced by size
DERIVED_FIELDS = frozenset({"quantity", "unit_price", "cost"})

# Fields edited directly as percentages
PERCENT_FIELDS = ("decoration_percent", "charges_percent")


class EditSession:
    """
    Pending line-item edits for one order.

    Never mutates the LineItems it is given; every edit stores a new
    snapshot keyed by item id.
    """

    def __init__(self, order_id: str):
        self.order_id = order_id
        self._pending: dict[str, LineItem] = {}
        self._state = EditSessionState.CLEAN

    # ===================
    # STATE
    # ===================

    @property
    def state(self) -> EditSessionState:
        return self._state

    @property
    def is_dirty(self) -> bool:
        return self._state == EditSessionState.DIRTY

    @property
    def pending(self) -> dict[str, LineItem]:
        """Copy of the pending edits (item id → edited item)."""
        return dict(self._pending)

    def pending_for(self, item_id: str) -> Optional[LineItem]:
        return self._pending.get(item_id)

    def current(self, original: LineItem) -> LineItem:
        """The pending version of an item, or the original if unedited."""
        return self._pending.get(original.id, original)

    def _transition(self, new_state: EditSessionState) -> None:
        if new_state == self._state:
            return
        if not is_valid_session_transition(self._state, new_state):
            raise InvalidStatusTransitionError(
                current_status=self._state.value,
                new_status=new_state.value
            )
        logger.debug(
            "edit_session_transition",
            order_id=self.order_id,
            from_state=self._state.value,
            to_state=new_state.value,
        )
        self._state = new_state

    def _ensure_editable(self) -> None:
        if self._state == EditSessionState.SAVING:
            raise InvalidStatusTransitionError(
                current_status=self._state.value,
                new_status=EditSessionState.DIRTY.value
            )

    def _store(self, item: LineItem) -> LineItem:
        self._pending[item.id] = item
        self._transition(EditSessionState.DIRTY)
        return item

    # ===================
    # EDITS
    # ===================

    def apply_edit(self, original: LineItem, **changes: Any) -> LineItem:
        """
        Apply field edits to an item.

        Values are coerced the same way as loaded records (malformed → 0,
        percentages to two decimals, quantities to whole units).

        Args:
            original: Item as loaded
            **changes: Field name → raw value

        Returns:
            The new pending LineItem

        Raises:
            DerivedFieldEditError: quantity/unit_price/cost on a by-size item
            InvalidStatusTransitionError: session is saving
        """
        self._ensure_editable()
        base = self.current(original)

        if base.is_size_priced and "size_pricing" not in changes:
            derived = sorted(DERIVED_FIELDS.intersection(changes))
            if derived:
                raise DerivedFieldEditError(base.id, derived)

        data = base.model_dump()
        if "size_pricing" in changes:
            data.pop("pricing")
        data.update(changes)
        data["id"] = base.id

        item = apply_size_aggregate(LineItem.model_validate(data))

        logger.debug(
            "line_item_edited",
            order_id=self.order_id,
            item_id=item.id,
            fields=sorted(changes),
        )
        return self._store(item)

    def edit_size_bucket(self, original: LineItem, size: str, field: str, value: Any) -> LineItem:
        """Edit one column of one size bucket; aggregates are re-derived."""
        self._ensure_editable()
        item = update_size_bucket(self.current(original), size, field, value)
        return self._store(item)

    def set_percentage(self, original: LineItem, field: str, value: Any) -> LineItem:
        """
        Direct decoration/charges percentage edit.

        Raises:
            UnknownPercentFieldError: field is not a percentage field
        """
        if field not in PERCENT_FIELDS:
            raise UnknownPercentFieldError(field, PERCENT_FIELDS)
        return self.apply_edit(original, **{field: value})

    def set_product_margin(self, original: LineItem, margin_percent: Any) -> LineItem:
        """
        Re-price an item to hit a product margin.

        An unsolvable margin (>= 100%, or no cost) leaves the item as it
        was and does not dirty the session.
        """
        self._ensure_editable()
        base = self.current(original)
        new_price = price_from_product_margin(base.cost, margin_percent, base.unit_price)

        if new_price == base.unit_price:
            return base
        return self.apply_edit(original, unit_price=new_price)

    def set_total_margin(self, original: LineItem, margin_percent: Any) -> LineItem:
        """
        Re-price an item to hit a total margin.

        Decoration and charges are taken per unit at the current price:
            decoration = unit_price × decoration%
            charges    = (unit_price + decoration) × charges%
        """
        self._ensure_editable()
        base = self.current(original)

        decoration_amount = base.unit_price * base.decoration_percent / PERCENT_BASE
        charges_amount = (base.unit_price + decoration_amount) * base.charges_percent / PERCENT_BASE

        new_price = price_from_total_margin(
            base.cost,
            decoration_amount,
            charges_amount,
            margin_percent,
            base.unit_price,
        )

        if new_price == base.unit_price:
            return base
        return self.apply_edit(original, unit_price=new_price)

    # ===================
    # SAVE
    # ===================

    def begin_save(self, original_items: Iterable[LineItem]) -> ReconciledOrder:
        """
        Reconcile pending edits and enter SAVING.

        The session only moves to SAVING once the payload is built; if
        reconciliation raises, it stays DIRTY with every edit kept.

        Raises:
            InvalidStatusTransitionError: session is not dirty
        """
        if not is_valid_session_transition(self._state, EditSessionState.SAVING):
            raise InvalidStatusTransitionError(
                current_status=self._state.value,
                new_status=EditSessionState.SAVING.value
            )

        result = reconcile(original_items, self._pending)
        self._transition(EditSessionState.SAVING)
        return result

    def mark_saved(self) -> None:
        """Persist succeeded: drop pending edits, back to CLEAN."""
        self._transition(EditSessionState.CLEAN)
        cleared = len(self._pending)
        self._pending.clear()
        logger.info("edit_session_saved", order_id=self.order_id, items_saved=cleared)

    def mark_failed(self, error: Optional[BaseException] = None) -> None:
        """Persist failed: keep pending edits for retry, back to DIRTY."""
        self._transition(EditSessionState.DIRTY)
        logger.warning(
            "edit_session_save_failed",
            order_id=self.order_id,
            pending_items=len(self._pending),
            error=str(error) if error else None,
        )

    def save(
        self,
        original_items: Iterable[LineItem],
        persist: Callable[[dict], Any],
    ) -> Optional[ReconciledOrder]:
        """
        Reconcile, persist and settle the session in one call.

        Args:
            original_items: Items as last loaded
            persist: Writes the {items, subtotal, total} payload; any
                exception counts as failure

        Returns:
            The persisted ReconciledOrder, or None when there was nothing
            to save

        Raises:
            OrderSaveError: persist failed (edits retained)
        """
        if not self.is_dirty:
            logger.debug("edit_session_nothing_to_save", order_id=self.order_id)
            return None

        result = self.begin_save(original_items)
        try:
            persist(result.to_payload())
        except Exception as e:
            self.mark_failed(e)
            raise OrderSaveError(self.order_id, str(e)) from e

        self.mark_saved()
        return result
