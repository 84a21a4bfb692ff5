# backend/dca_tracker/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The router layer is responsible for mapping these to appropriate HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    └── ValidationError
        ├── InvalidPurchaseError
        ├── InvalidPriceError
        ├── InvalidGoalError
        ├── InvalidAlertError
        └── InvalidProjectionError

Degenerate-but-valid input (no purchases, zero price, a single purchase for
the lump-sum comparison) and numerical fallbacks are NOT errors. They produce
neutral results flagged through labels and warnings.
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when a value handed to the engine violates its contract.

    Request payloads are validated by Pydantic before they get here; this
    covers programmatic misuse of the engine types.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidPurchaseError(ValidationError):
    """
    Raised when a purchase event has a non-positive amount, price or quantity.
    """

    def __init__(self, field: str, value: object) -> None:
        self.value = value
        super().__init__(
            f"Purchase {field} must be positive, got {value!r}",
            field=field,
        )


class InvalidPriceError(ValidationError):
    """
    Raised when the current price is negative.

    Zero is legal and means "price not set yet".
    """

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(
            f"Current price must be zero or positive, got {value!r}",
            field="current_price",
        )


class InvalidGoalError(ValidationError):
    """Raised when a goal target quantity is negative."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(
            f"Goal target quantity must be zero or positive, got {value!r}",
            field="target_quantity",
        )


class InvalidAlertError(ValidationError):
    """Raised when a price alert has a non-positive target price."""

    def __init__(self, alert_id: str, value: object) -> None:
        self.alert_id = alert_id
        super().__init__(
            f"Alert '{alert_id}' target price must be positive, got {value!r}",
            field="target_price",
        )


class InvalidProjectionError(ValidationError):
    """
    Raised when DCA projection inputs are out of range.

    Attributes:
        reason: Specific reason the inputs were rejected
    """

    def __init__(self, field: str, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid projection {field}: {reason}", field=field)


__all__ = [
    # Base
    "ServiceError",
    # Validation
    "ValidationError",
    "InvalidPurchaseError",
    "InvalidPriceError",
    "InvalidGoalError",
    "InvalidAlertError",
    "InvalidProjectionError",
]
