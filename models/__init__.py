"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    FrozenSchema,
)
from models.line_item import (
    SizeBucket,
    SimplePricing,
    BySizePricing,
    PricingMode,
    LineItem,
    SizeAggregate,
    OrderTotals,
)
from models.order import (
    PersistableItem,
    ReconciledOrder,
    OrderSummary,
    OrderTotalRecalculation,
)
from models.edit_session import (
    EditSessionState,
    is_valid_session_transition,
)

__all__ = [
    # Base
    "BaseSchema",
    "FrozenSchema",

    # Line items
    "SizeBucket",
    "SimplePricing",
    "BySizePricing",
    "PricingMode",
    "LineItem",
    "SizeAggregate",
    "OrderTotals",

    # Orders
    "PersistableItem",
    "ReconciledOrder",
    "OrderSummary",
    "OrderTotalRecalculation",

    # Edit sessions
    "EditSessionState",
    "is_valid_session_transition",
]
