"""
Domain-specific exceptions for offers app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class OffersServiceError(Exception):
    """Base exception for all offers service errors."""
    pass


class OfferNotFoundError(OffersServiceError):
    """Raised when an offer does not exist or is not visible."""
    pass


class PartnerNotApprovedError(OffersServiceError):
    """Raised when a partner that is not approved tries to publish offers."""
    pass


class NotOfferOwnerError(OffersServiceError):
    """Raised when a partner edits an offer that belongs to someone else."""
    pass


class InvalidOfferDataError(OffersServiceError):
    """Raised when offer pricing or dates break the offer invariants."""
    pass
