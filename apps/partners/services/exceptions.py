"""
Domain-specific exceptions for partners app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class PartnersServiceError(Exception):
    """Base exception for all partners service errors."""
    pass


class PartnerNotFoundError(PartnersServiceError):
    """Raised when a partner profile does not exist."""
    pass


class InvalidStatusTransitionError(PartnersServiceError):
    """Raised when a review targets a partner that is no longer pending."""
    pass


class PartnerRegistrationError(PartnersServiceError):
    """Raised when a partner application cannot be created."""
    pass
