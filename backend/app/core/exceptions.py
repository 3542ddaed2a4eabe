"""
Typed errors raised by the order engine.

Every error carries the HTTP status it maps to; app.main turns them into
sanitized JSON responses. Store-level detail never goes into the message.
"""
from typing import Optional


class StorefrontError(Exception):
    """Base error for the order engine"""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def error_type(self) -> str:
        return type(self).__name__


class ValidationError(StorefrontError):
    """Malformed or semantically invalid input"""

    status_code = 400


class CouponRejected(ValidationError):
    """Coupon exists but cannot be applied; message is the reason shown to the buyer"""

    def __init__(self, reason: str, code: Optional[str] = None):
        self.code = code
        super().__init__(reason)


class NotFound(StorefrontError):
    status_code = 404


class ProductNotFound(NotFound):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class OrderNotFound(NotFound):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class CouponNotFound(NotFound):
    def __init__(self, code: str):
        self.code = code
        super().__init__("Coupon not found")


class UserNotFound(NotFound):
    def __init__(self, email: str):
        self.email = email
        super().__init__("User not found")


class Unauthorized(StorefrontError):
    status_code = 401


class Forbidden(StorefrontError):
    status_code = 403


class InsufficientStock(StorefrontError):
    """Requested quantity exceeds what the product (or variant) has left"""

    status_code = 409

    def __init__(self, product_id: int, product_name: Optional[str] = None,
                 variant_key: Optional[str] = None):
        self.product_id = product_id
        self.product_name = product_name
        self.variant_key = variant_key

        label = product_name or str(product_id)
        if variant_key:
            label = f"{label} ({variant_key})"
        super().__init__(f"Insufficient stock for product: {label}")


class InvalidStateTransition(StorefrontError):
    status_code = 409

    def __init__(self, current: str, requested: str, message: Optional[str] = None):
        self.current = current
        self.requested = requested
        super().__init__(
            message or f"Order cannot move from {current} to {requested}"
        )


class RateLimitExceeded(StorefrontError):
    status_code = 429

    def __init__(self, retry_after: int, reset_time: float, limit: int):
        self.retry_after = retry_after
        self.reset_time = reset_time
        self.limit = limit
        super().__init__("Too many requests. Please try again later.")


class InternalFailure(StorefrontError):
    """Unexpected store failure; the original error is chained, never exposed"""

    status_code = 500
