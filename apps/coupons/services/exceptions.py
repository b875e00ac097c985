"""
Domain-specific exceptions for coupons app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class CouponsServiceError(Exception):
    """Base exception for all coupons service errors."""
    pass


class CouponNotFoundError(CouponsServiceError):
    """Raised when a coupon does not exist or is not visible to the caller."""
    pass


class OfferNotEligibleError(CouponsServiceError):
    """Raised when an offer cannot currently be minted or redeemed against."""
    pass


class InvalidOfferStateError(CouponsServiceError):
    """Raised when an offer that passed eligibility is already expired at mint time."""
    pass


class InvalidTokenError(CouponsServiceError):
    """Raised when a scanned token or QR payload matches no coupon."""
    pass


class WrongPartnerError(CouponsServiceError):
    """Raised when a coupon is scanned by a partner that did not issue it."""
    pass


class CouponExpiredError(CouponsServiceError):
    """Raised when a coupon is used past its expiry date."""

    def __init__(self, message, expiry_date):
        super().__init__(message)
        self.expiry_date = expiry_date


class AlreadyRedeemedError(CouponsServiceError):
    """Raised when a coupon has already been redeemed."""

    def __init__(self, message, redeemed_at):
        super().__init__(message)
        self.redeemed_at = redeemed_at


class CodeGenerationError(CouponsServiceError):
    """Raised when no unused coupon code could be drawn within the attempt budget."""
    pass
