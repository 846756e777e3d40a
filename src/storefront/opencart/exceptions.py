"""Exceptions raised by OpenCart domain services."""


class StorefrontError(Exception):
    """Base exception for business-rule violations (reported as HTTP 400)."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CouponError(StorefrontError):
    """Raised when a coupon cannot be applied."""


class CategoryError(StorefrontError):
    """Raised when a category change would break the tree."""


class CheckoutError(StorefrontError):
    """Raised when a cart cannot be turned into an order."""
