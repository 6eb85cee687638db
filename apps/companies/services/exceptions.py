"""Domain-specific exceptions for company services."""


class CompaniesServiceError(Exception):
    """Base exception for company services."""
    pass


class CompanyNotFoundError(CompaniesServiceError):
    """Raised when a company does not exist, was deleted or belongs to another user."""
    pass


class InvalidCompanyDataError(CompaniesServiceError):
    """Raised when company, fee or schedule data fails model validation."""

    def __init__(self, errors):
        self.errors = errors
        super().__init__('; '.join(
            f"{field}: {' '.join(messages)}" for field, messages in errors.items()
        ))


class FeeNotFoundError(CompaniesServiceError):
    """Raised when no fee is registered for the requested month."""
    pass


class BoletoNotFoundError(CompaniesServiceError):
    """Raised when a boleto does not exist or belongs to another user's company."""
    pass


class InvalidBoletoStateError(CompaniesServiceError):
    """Raised when a boleto transition is not allowed from its current status."""
    pass


class ScheduleNotFoundError(CompaniesServiceError):
    """Raised when a company has no boleto schedule."""
    pass
