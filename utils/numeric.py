"""
Numeric coercion shared by every engine entry point.

Form fields arrive as strings ("12.50", "$1,200", "15%", ""), floats or
None. Everything funnels through parse_decimal/to_decimal so the
calculators only ever see finite Decimals.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import structlog

from config.pricing import (
    CURRENCY_QUANT,
    MAX_INPUT_EXPONENT,
    PERCENT_QUANT,
    ROUNDING_MODE,
    ZERO,
)
from exceptions import InvalidNumericInputError

logger = structlog.get_logger(__name__)

_STRIP_CHARS = ("$", ",", "%", " ")

UNIT_QUANT = Decimal("1")


def parse_decimal(value: Any, field: Optional[str] = None) -> Decimal:
    """
    Parse a value into a finite Decimal.

    Accepts Decimal, int, float and numeric strings. Currency symbols,
    thousands separators and a percent sign are ignored in strings.

    Args:
        value: Raw value
        field: Field name, for error context

    Returns:
        Finite Decimal

    Raises:
        InvalidNumericInputError: None, bool, empty, NaN, infinite, garbage
            or magnitude of 10^28 and above
    """
    if value is None or isinstance(value, bool):
        raise InvalidNumericInputError(value, field)

    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, int):
            result = Decimal(value)
        elif isinstance(value, float):
            result = Decimal(str(value))
        else:
            text = str(value).strip()
            for char in _STRIP_CHARS:
                text = text.replace(char, "")
            if not text:
                raise InvalidNumericInputError(value, field)
            result = Decimal(text)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidNumericInputError(value, field)

    if not result.is_finite():
        raise InvalidNumericInputError(value, field)

    if result and result.adjusted() > MAX_INPUT_EXPONENT:
        raise InvalidNumericInputError(value, field, reason="magnitude out of range")

    return result


def to_decimal(value: Any, field: Optional[str] = None, default: Decimal = ZERO) -> Decimal:
    """
    Lenient parse: malformed input becomes `default` (0).

    None and empty strings are treated as "not filled in" and return the
    default without logging.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default

    try:
        return parse_decimal(value, field)
    except InvalidNumericInputError as e:
        logger.debug("invalid_numeric_input", field=field, value=repr(value), code=e.code)
        return default


def to_money(value: Any, field: Optional[str] = None) -> Decimal:
    """Lenient parse for prices and costs; negatives become 0."""
    amount = to_decimal(value, field)
    if amount < ZERO:
        logger.debug("negative_amount_clamped", field=field, value=str(amount))
        return ZERO
    return amount


def _quantize(value: Decimal, quant: Decimal, field: Optional[str] = None) -> Decimal:
    """
    Round half-up to `quant`; 0 when the result needs more digits than
    the Decimal context holds.
    """
    try:
        return value.quantize(quant, rounding=ROUNDING_MODE)
    except InvalidOperation:
        logger.debug("numeric_out_of_range", field=field, value=str(value))
        return ZERO.quantize(quant)


def to_quantity(value: Any, field: Optional[str] = None) -> int:
    """
    Coerce to a whole, non-negative unit count.

    Fractions round half-up (2.5 -> 3); negatives become 0.
    """
    number = to_decimal(value, field)
    quantity = int(_quantize(number, UNIT_QUANT, field))
    if quantity < 0:
        logger.debug("negative_quantity_clamped", field=field, value=quantity)
        return 0
    return quantity


def to_optional_int(value: Any, field: Optional[str] = None) -> Optional[int]:
    """Coerce to int, keeping None (and malformed input) as None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = parse_decimal(value, field)
    except InvalidNumericInputError as e:
        logger.debug("invalid_numeric_input", field=field, value=repr(value), code=e.code)
        return None
    return int(_quantize(number, UNIT_QUANT, field))


def round_currency(value: Decimal) -> Decimal:
    """Round a money amount to cents, half-up."""
    return _quantize(to_decimal(value), CURRENCY_QUANT)


def round_percent(value: Decimal) -> Decimal:
    """Round a percentage to two decimals, half-up."""
    return _quantize(to_decimal(value), PERCENT_QUANT)
