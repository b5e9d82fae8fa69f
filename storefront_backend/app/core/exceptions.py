"""
Storefront Exception Hierarchy

Structured exception classes for the shipping engine and checkout.
All exceptions include code, message, and details for logging and for the
JSON error body returned to API clients.

Exception Hierarchy:
    StorefrontError
    ├── ShippingError
    │   ├── ShippingValidationError   (400, VALIDATION_ERROR)
    │   └── ShippingNotFoundError     (404, NOT_FOUND)
    └── OrderError
        ├── OrderValidationError      (400, VALIDATION_ERROR)
        └── OrderPersistenceError     (500, INTERNAL_ERROR)
"""
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)

VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"
INTERNAL_ERROR = "INTERNAL_ERROR"


class StorefrontError(Exception):
    """
    Base exception for all storefront custom errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        severity: P0-P3 severity level
        status_code: HTTP status the API layer maps this error to
    """

    default_code: str = INTERNAL_ERROR
    default_severity: str = "P2"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# SHIPPING ERRORS
# =============================================================================

class ShippingError(StorefrontError):
    """Base exception for shipping-related errors."""
    default_code = "SHIPPING_ERROR"
    default_severity = "P1"


class ShippingValidationError(ShippingError):
    """Bad input shape, unresolvable postal code or unknown product ids."""
    default_code = VALIDATION_ERROR
    default_severity = "P3"
    status_code = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if field is not None:
            details["field"] = field
        super().__init__(message, details=details, **kwargs)


class ShippingNotFoundError(ShippingError):
    """No zone and no postal code range covers the destination."""
    default_code = NOT_FOUND
    default_severity = "P3"
    status_code = 404

    def __init__(
        self,
        message: str,
        postal_code: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details["postal_code"] = postal_code
        super().__init__(message, details=details, **kwargs)


# =============================================================================
# ORDER ERRORS
# =============================================================================

class OrderError(StorefrontError):
    """Base exception for order-related errors."""
    default_code = "ORDER_ERROR"
    default_severity = "P1"


class OrderPersistenceError(OrderError):
    """The order or its shipping fields could not be stored."""
    default_code = INTERNAL_ERROR
    default_severity = "P0"
    status_code = 500


class OrderValidationError(OrderError):
    """Checkout payload can't become an order (address, unknown products)."""
    default_code = VALIDATION_ERROR
    default_severity = "P3"
    status_code = 400

    def __init__(
        self,
        message: str,
        fields: Optional[list] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if fields:
            details["fields"] = fields
        super().__init__(message, details=details, **kwargs)
