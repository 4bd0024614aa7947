"""
Application Error Taxonomy

Every error the service reports on purpose derives from RestaurantError and
carries the HTTP status and a machine-readable code. The FastAPI exception
handler in main.py renders them as ErrorResponse bodies.
"""

from typing import Optional


class RestaurantError(Exception):
    """Base class for errors reported to API callers."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(RestaurantError):
    """Missing or malformed input. Detected before any mutation."""
    status_code = 400
    code = "validation_error"


class NotFoundError(RestaurantError):
    status_code = 404
    code = "not_found"


class ConflictError(RestaurantError):
    """A uniqueness rule of the store was violated (duplicate coupon code)."""
    status_code = 409
    code = "conflict"


class ShopClosedError(RestaurantError):
    """Order rejected because the shop is outside its opening hours."""
    status_code = 403
    code = "shop_closed"


class StoreError(RestaurantError):
    """
    The database failed.

    The message is safe to show to callers; the underlying exception is
    logged server-side and chained as ``__cause__``.
    """
    status_code = 500
    code = "store_error"


class ExternalServiceError(RestaurantError):
    """The payment provider call failed."""
    status_code = 502
    code = "external_service_error"


class CheckoutUnavailableError(ExternalServiceError):
    """Online checkout is not configured (no Stripe secret key)."""
    status_code = 503
    code = "checkout_unavailable"
