"""
Unit tests for EditSession.

Covers edit accumulation, margin edits and the CLEAN → DIRTY → SAVING
state machine.

Run: pytest tests/unit/test_edit_session_service.py -v
"""

import pytest
from decimal import Decimal

from services.edit_session_service import EditSession
from models.edit_session import EditSessionState, is_valid_session_transition
from tests.factories import LineItemFactory
from exceptions import (
    DerivedFieldEditError,
    InvalidStatusTransitionError,
    OrderSaveError,
    UnknownPercentFieldError,
)


# ===================
# TEST 1: EDITS
# ===================

class TestApplyEdit:

    def test_new_session_is_clean(self, edit_session):
        assert edit_session.state == EditSessionState.CLEAN
        assert edit_session.pending == {}

    def test_first_edit_dirties(self, edit_session, simple_item):
        edit_session.apply_edit(simple_item, quantity=20)

        assert edit_session.state == EditSessionState.DIRTY
        assert edit_session.pending_for("item-1").quantity == 20

    def test_original_not_mutated(self, edit_session, simple_item):
        edit_session.apply_edit(simple_item, unit_price="12.00")

        assert simple_item.unit_price == Decimal("10")
        assert edit_session.current(simple_item).unit_price == Decimal("12.00")

    def test_edits_accumulate_per_field(self, edit_session, simple_item):
        edit_session.apply_edit(simple_item, quantity=20)
        edit_session.apply_edit(simple_item, unit_price="12.00")

        pending = edit_session.pending_for("item-1")
        assert pending.quantity == 20
        assert pending.unit_price == Decimal("12.00")

    def test_last_write_wins(self, edit_session, simple_item):
        edit_session.apply_edit(simple_item, quantity=20)
        edit_session.apply_edit(simple_item, quantity=30)

        assert edit_session.pending_for("item-1").quantity == 30

    def test_values_coerced(self, edit_session, simple_item):
        item = edit_session.apply_edit(
            simple_item,
            quantity="12.6",
            unit_price="$1,200.50",
            decoration_percent="12.345",
            cost="oops",
        )

        assert item.quantity == 13
        assert item.unit_price == Decimal("1200.50")
        assert item.decoration_percent == Decimal("12.35")
        assert item.cost == Decimal("0")

    def test_id_cannot_change(self, edit_session, simple_item):
        item = edit_session.apply_edit(simple_item, id="other", quantity=1)

        assert item.id == "item-1"

    def test_pending_is_a_copy(self, edit_session, simple_item):
        edit_session.apply_edit(simple_item, quantity=20)

        edit_session.pending.clear()

        assert edit_session.pending_for("item-1") is not None


class TestSizePricedEdits:

    def test_derived_fields_rejected(self, edit_session, size_priced_item):
        with pytest.raises(DerivedFieldEditError) as exc_info:
            edit_session.apply_edit(size_priced_item, unit_price="20", notes="rush")

        assert exc_info.value.details["fields"] == ["unit_price"]
        assert edit_session.state == EditSessionState.CLEAN

    def test_other_fields_allowed(self, edit_session, size_priced_item):
        item = edit_session.apply_edit(size_priced_item, decoration_percent="15")

        assert item.decoration_percent == Decimal("15.00")
        assert item.unit_price == Decimal("11.6")

    def test_bucket_edit(self, edit_session, size_priced_item):
        item = edit_session.edit_size_bucket(size_priced_item, "S", "quantity", 12)

        assert item.quantity == 20
        assert item.unit_price == Decimal("10.8")
        assert edit_session.is_dirty

    def test_bucket_edits_accumulate(self, edit_session, size_priced_item):
        """S qty 12 then M price 15: (10×12 + 15×8) / 20 = 12"""
        edit_session.edit_size_bucket(size_priced_item, "S", "quantity", 12)
        item = edit_session.edit_size_bucket(size_priced_item, "M", "price", 15)

        assert item.unit_price == Decimal("12")


# ===================
# TEST 2: MARGIN AND PERCENT EDITS
# ===================

class TestMarginEdits:

    def test_product_margin_reprices(self, edit_session, simple_item):
        """cost 6 at 50% margin → 6 / 0.5 = 12.00"""
        item = edit_session.set_product_margin(simple_item, 50)

        assert item.unit_price == Decimal("12.00")
        assert edit_session.is_dirty

    def test_unsolvable_margin_is_noop(self, edit_session, simple_item):
        item = edit_session.set_product_margin(simple_item, 100)

        assert item.unit_price == Decimal("10")
        assert edit_session.state == EditSessionState.CLEAN
        assert edit_session.pending == {}

    def test_total_margin_reprices(self, edit_session, simple_item):
        """
        per unit: decoration = 10 × 10% = 1, charges = 11 × 10% = 1.10
        total_cost = 6 + 1 + 1.10 = 8.10
        price = 8.10 / 0.6 - 2.10 = 11.40
        """
        item = edit_session.set_total_margin(simple_item, 40)

        assert item.unit_price == Decimal("11.40")

    def test_total_margin_unsolvable(self, edit_session, simple_item):
        item = edit_session.set_total_margin(simple_item, 120)

        assert item is simple_item
        assert not edit_session.is_dirty

    def test_set_percentage(self, edit_session, simple_item):
        item = edit_session.set_percentage(simple_item, "charges_percent", "7.125")

        assert item.charges_percent == Decimal("7.13")

    def test_set_percentage_unknown_field(self, edit_session, simple_item):
        with pytest.raises(UnknownPercentFieldError):
            edit_session.set_percentage(simple_item, "unit_price", "7")


# ===================
# TEST 3: SAVE
# ===================

class TestSave:

    def test_successful_save_clears_session(self, edit_session, order_items, persist):
        edit_session.apply_edit(order_items[1], unit_price="12")

        result = edit_session.save(order_items, persist)

        assert result.subtotal == Decimal("185.00")
        persist.assert_called_once_with(result.to_payload())
        assert edit_session.state == EditSessionState.CLEAN
        assert edit_session.pending == {}

    def test_failed_save_keeps_edits(self, edit_session, order_items, failing_persist):
        edit_session.apply_edit(order_items[1], unit_price="12")

        with pytest.raises(OrderSaveError) as exc_info:
            edit_session.save(order_items, failing_persist)

        assert exc_info.value.details["order_id"] == "order-123"
        assert edit_session.state == EditSessionState.DIRTY
        assert edit_session.pending_for("item-2").unit_price == Decimal("12")

    def test_retry_after_failure(self, edit_session, order_items, failing_persist, persist):
        edit_session.apply_edit(order_items[1], unit_price="12")
        with pytest.raises(OrderSaveError):
            edit_session.save(order_items, failing_persist)

        result = edit_session.save(order_items, persist)

        assert result.subtotal == Decimal("185.00")
        assert edit_session.state == EditSessionState.CLEAN

    def test_clean_session_save_is_noop(self, edit_session, order_items, persist):
        assert edit_session.save(order_items, persist) is None
        persist.assert_not_called()

    def test_edits_rejected_while_saving(self, edit_session, order_items):
        edit_session.apply_edit(order_items[0], quantity=1)
        edit_session.begin_save(order_items)

        with pytest.raises(InvalidStatusTransitionError):
            edit_session.apply_edit(order_items[0], quantity=2)

    def test_begin_save_requires_dirty(self, edit_session, order_items):
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            edit_session.begin_save(order_items)

        assert exc_info.value.details["current_status"] == "CLEAN"

    def test_manual_save_flow(self, edit_session, order_items):
        edit_session.apply_edit(order_items[0], quantity=1)

        result = edit_session.begin_save(order_items)
        assert edit_session.state == EditSessionState.SAVING
        assert result.items[0].total_price == Decimal("10.00")

        edit_session.mark_failed(TimeoutError("timeout"))
        assert edit_session.state == EditSessionState.DIRTY

        edit_session.begin_save(order_items)
        edit_session.mark_saved()
        assert edit_session.state == EditSessionState.CLEAN


# ===================
# TEST 4: TRANSITIONS
# ===================

class TestSessionTransitions:

    @pytest.mark.parametrize("current,new,expected", [
        (EditSessionState.CLEAN, EditSessionState.DIRTY, True),
        (EditSessionState.DIRTY, EditSessionState.SAVING, True),
        (EditSessionState.SAVING, EditSessionState.CLEAN, True),
        (EditSessionState.SAVING, EditSessionState.DIRTY, True),
        (EditSessionState.CLEAN, EditSessionState.SAVING, False),
        (EditSessionState.DIRTY, EditSessionState.CLEAN, False),
        (EditSessionState.CLEAN, EditSessionState.CLEAN, False),
    ])
    def test_is_valid_session_transition(self, current, new, expected):
        assert is_valid_session_transition(current, new) is expected


# ===================
# TEST 5: SAVE FAILURE BEFORE PERSIST
# ===================

class TestReconcileFailureKeepsEdits:

    def test_reconcile_error_leaves_session_dirty(self, edit_session, order_items, persist, monkeypatch):
        edit_session.apply_edit(order_items[0], quantity=2)

        def broken_reconcile(original_items, edits):
            raise RuntimeError("reconcile failed")

        monkeypatch.setattr("services.edit_session_service.reconcile", broken_reconcile)

        with pytest.raises(RuntimeError):
            edit_session.save(order_items, persist)

        assert edit_session.state == EditSessionState.DIRTY
        assert edit_session.pending_for("item-1").quantity == 2
        persist.assert_not_called()

    def test_can_edit_and_save_after_reconcile_error(self, edit_session, order_items, persist, monkeypatch):
        edit_session.apply_edit(order_items[0], quantity=2)

        def broken_reconcile(original_items, edits):
            raise RuntimeError("reconcile failed")

        monkeypatch.setattr("services.edit_session_service.reconcile", broken_reconcile)
        with pytest.raises(RuntimeError):
            edit_session.begin_save(order_items)
        monkeypatch.undo()

        edit_session.apply_edit(order_items[0], quantity=3)
        result = edit_session.save(order_items, persist)

        assert result.items[0].total_price == Decimal("30.00")
        assert edit_session.state == EditSessionState.CLEAN

    def test_huge_stored_total_does_not_block_save(self, edit_session, persist):
        good = LineItemFactory.build(id="1", quantity=1, unit_price="5")
        huge = LineItemFactory.build(id="2", total_price="1e40")
        edit_session.apply_edit(good, quantity=2)

        result = edit_session.save([good, huge], persist)

        assert result.subtotal == Decimal("10.00")
        assert edit_session.state == EditSessionState.CLEAN
