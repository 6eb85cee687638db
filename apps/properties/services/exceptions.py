"""Domain-specific exceptions for property services."""


class PropertiesServiceError(Exception):
    """Base exception for property services."""
    pass


class PropertyNotFoundError(PropertiesServiceError):
    """Raised when a property does not exist or belongs to another user."""
    pass


class InvalidPropertyDataError(PropertiesServiceError):
    """Raised when property data fails model validation."""

    def __init__(self, errors):
        self.errors = errors
        super().__init__('; '.join(
            f"{field}: {' '.join(messages)}" for field, messages in errors.items()
        ))


class DuplicatePropertyError(PropertiesServiceError):
    """Raised when creating a property that already exists for the user."""

    def __init__(self, existing):
        self.existing = existing
        super().__init__(f"Imóvel já cadastrado (ID {existing.id})")


class SyncOperationError(PropertiesServiceError):
    """Raised when a queued offline operation cannot be applied."""
    pass
