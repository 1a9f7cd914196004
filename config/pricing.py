"""
Pricing constants shared by the calculation services.

Rounding rules follow the persistence contract: money and percentages are
stored with two decimal places, quantities are whole units.
"""

from decimal import Decimal, ROUND_HALF_UP

# =============================================================================
# ROUNDING
# =============================================================================

# Currency amounts are stored as cents
CURRENCY_QUANT = Decimal("0.01")

# Percentages (margins, decoration, charges) keep two decimals
PERCENT_QUANT = Decimal("0.01")

# Half-up, as on a printed quote (2.345 -> 2.35)
ROUNDING_MODE = ROUND_HALF_UP

PERCENT_BASE = Decimal("100")

ZERO = Decimal("0")


# =============================================================================
# SIZE PRICING
# =============================================================================

# Editable columns of one size bucket
SIZE_BUCKET_FIELDS = ("cost", "price", "quantity")

# Apparel suppliers that quote per garment size (matched against the
# normalized supplier name)
DEFAULT_SIZE_PRICING_SUPPLIERS = ("SANMAR", "S&S")


# =============================================================================
# ORDER TOTALS
# =============================================================================

# Stored order totals closer than this to the item sum are not rewritten
TOTAL_DRIFT_TOLERANCE = Decimal("0.01")


# =============================================================================
# INPUT RANGE
# =============================================================================

# Inputs at or above 10^28 cannot be quantized within the default Decimal
# context (28 significant digits) and are treated as malformed
MAX_INPUT_EXPONENT = 27
