"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ExternalServiceError,

    # Numeric input
    InvalidNumericInputError,

    # Margins
    MarginUnsolvableError,

    # Line item edits
    DerivedFieldEditError,
    UnknownSizeFieldError,
    UnknownPercentFieldError,

    # Edit sessions
    InvalidStatusTransitionError,
    OrderSaveError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ExternalServiceError",

    # Numeric input
    "InvalidNumericInputError",

    # Margins
    "MarginUnsolvableError",

    # Line item edits
    "DerivedFieldEditError",
    "UnknownSizeFieldError",
    "UnknownPercentFieldError",

    # Edit sessions
    "InvalidStatusTransitionError",
    "OrderSaveError",
]
