"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when user registration fails."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    pass


class InvalidTokenError(AccountsServiceError):
    """Raised when a reset token is unknown or expired."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass
