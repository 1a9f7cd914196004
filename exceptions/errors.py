"""
Custom exception classes for the pricing engine.

Calculation errors are recovered where they happen (see services); the
classes below carry the code and context used in structured logs.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all engine errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "MARGIN_UNSOLVABLE")
        message: Human-readable message
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to log/response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            details=details
        )


class ExternalServiceError(AppError):
    """External collaborator failure."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            details={"service": service, **(details or {})}
        )


# ===================
# NUMERIC INPUT ERRORS
# ===================

class InvalidNumericInputError(ValidationError):
    """A field value does not parse as a finite number in range."""

    def __init__(self, value: Any, field: Optional[str] = None, reason: str = "not a finite number"):
        super().__init__(
            code="INVALID_NUMERIC_INPUT",
            message=f"Invalid numeric input {value!r}: {reason}",
            details={"value": repr(value), "field": field, "reason": reason}
        )


# ===================
# MARGIN ERRORS
# ===================

class MarginUnsolvableError(AppError):
    """Target margin cannot be turned into a valid unit price."""

    def __init__(self, margin_percent: Any, reason: str, details: Optional[dict] = None):
        super().__init__(
            code="MARGIN_UNSOLVABLE",
            message=f"Cannot solve price for margin {margin_percent}%: {reason}",
            details={"margin_percent": str(margin_percent), "reason": reason, **(details or {})}
        )


# ===================
# LINE ITEM EDIT ERRORS
# ===================

class DerivedFieldEditError(ValidationError):
    """Direct edit of a field that size pricing derives."""

    def __init__(self, item_id: str, fields: list[str]):
        super().__init__(
            code="DERIVED_FIELD_EDIT",
            message="Quantity, unit price and cost are derived from size pricing",
            details={"item_id": item_id, "fields": fields}
        )


class UnknownSizeFieldError(ValidationError):
    """Size bucket edit names a column that does not exist."""

    def __init__(self, field: str, valid: tuple):
        super().__init__(
            code="UNKNOWN_SIZE_FIELD",
            message=f"Unknown size pricing field: {field}",
            details={"provided": field, "valid": list(valid)}
        )


class UnknownPercentFieldError(ValidationError):
    """Percentage edit names a field that is not a percentage."""

    def __init__(self, field: str, valid: tuple):
        super().__init__(
            code="UNKNOWN_PERCENT_FIELD",
            message=f"Unknown percentage field: {field}",
            details={"provided": field, "valid": list(valid)}
        )


# ===================
# EDIT SESSION ERRORS
# ===================

class InvalidStatusTransitionError(ValidationError):
    """Invalid edit session state transition."""

    def __init__(self, current_status: str, new_status: str):
        super().__init__(
            code="INVALID_STATUS_TRANSITION",
            message=f"Cannot transition from {current_status} to {new_status}",
            details={
                "current_status": current_status,
                "new_status": new_status,
                "reason": "Edit sessions move CLEAN -> DIRTY -> SAVING -> CLEAN or DIRTY"
            }
        )


class OrderSaveError(ExternalServiceError):
    """Persisting a reconciled order failed; edits are kept for retry."""

    def __init__(self, order_id: str, message: str):
        super().__init__(
            service="order_update",
            message=f"Saving order {order_id} failed: {message}",
            details={"order_id": order_id}
        )
