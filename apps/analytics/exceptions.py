"""
Domain exceptions for analytics app.

Exception Hierarchy:
    AnalyticsServiceError (base)
    └── InvalidYearError
"""


class AnalyticsServiceError(Exception):
    """
    Base exception for all analytics errors.

        try:
            data = AnalyticsQueries.companies_overview(user, year=year)
        except AnalyticsServiceError as e:
            return Response({'error': str(e)}, status=400)
    """

    pass


class InvalidYearError(AnalyticsServiceError):
    """Raised when a fee year is outside the supported range."""

    pass
