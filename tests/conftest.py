"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from unittest.mock import MagicMock

from models.line_item import LineItem
from services.edit_session_service import EditSession
from tests.factories import LineItemFactory


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def reset_factory_counter():
    """Keep generated ids stable per test."""
    LineItemFactory.reset_counter()
    yield


@pytest.fixture
def simple_item() -> LineItem:
    """
    10 units at $10 with 10% decoration and 10% charges.

    Totals: product 100, decoration 10, charges 11, total 121.
    """
    return LineItemFactory.build(
        id="item-1",
        quantity=10,
        unit_price="10",
        cost="6",
        decoration_percent="10",
        charges_percent="10",
        total_price="121.00",
    )


@pytest.fixture
def size_priced_item() -> LineItem:
    """SanMar-style item: S {5, 10, 2}, M {6, 12, 8}."""
    return LineItemFactory.build_by_size(
        id="item-sizes",
        sizes={
            "S": {"cost": "5", "price": "10", "quantity": 2},
            "M": {"cost": "6", "price": "12", "quantity": 8},
        },
    )


@pytest.fixture
def order_items() -> list[LineItem]:
    """Three items with known stored totals 100.00, 50.00, 25.00."""
    return [
        LineItemFactory.build(id="item-1", quantity=10, unit_price="10", total_price="100.00"),
        LineItemFactory.build(id="item-2", quantity=5, unit_price="10", total_price="50.00"),
        LineItemFactory.build(id="item-3", quantity=5, unit_price="5", total_price="25.00"),
    ]


@pytest.fixture
def edit_session() -> EditSession:
    """Fresh CLEAN session for order-123."""
    return EditSession("order-123")


@pytest.fixture
def persist() -> MagicMock:
    """Successful persist callable."""
    return MagicMock(return_value={"ok": True})


@pytest.fixture
def failing_persist() -> MagicMock:
    """Persist callable that fails like a dropped connection."""
    return MagicMock(side_effect=ConnectionError("connection reset"))
