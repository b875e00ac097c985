"""
Domain exceptions for analytics app.

This module defines domain-specific exceptions that are raised by the
analytics queries. These exceptions represent invalid requests, separate
from HTTP concerns.

Exception Hierarchy:
    AnalyticsServiceError (base)
    ├── InvalidScopeError
    ├── InvalidDateRangeError
    └── MissingParameterError

Usage:
    from apps.analytics.exceptions import InvalidScopeError

    if scope not in AnalyticsScope.CHOICES:
        raise InvalidScopeError(f"Invalid scope: {scope}")
"""


class AnalyticsServiceError(Exception):
    """
    Base exception for all analytics service errors.

    All domain-specific exceptions in the analytics app inherit from this
    class, making it easy to catch all analytics errors in views:

        try:
            data = AnalyticsQueries.summarize('partner')
        except AnalyticsServiceError as e:
            return Response({'error': str(e)}, status=400)
    """

    pass


class InvalidScopeError(AnalyticsServiceError):
    """
    Raised when an unknown analytics scope is requested.

    Valid scopes are: platform, partner.
    """

    pass


class InvalidDateRangeError(AnalyticsServiceError):
    """
    Raised when date range is invalid.

    Typically when start_date is after end_date.

    Example:
        raise InvalidDateRangeError("Start date must be before end date")
    """

    pass


class MissingParameterError(AnalyticsServiceError):
    """
    Raised when a required parameter is missing.

    Example:
        raise MissingParameterError("partner_id is required for partner analytics")
    """

    pass
