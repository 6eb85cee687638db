"""Services for rural property business logic."""

from .exceptions import (
    PropertiesServiceError,
    PropertyNotFoundError,
    InvalidPropertyDataError,
    DuplicatePropertyError,
    SyncOperationError,
)
from .property_management import (
    create_property,
    update_property,
    delete_property,
    mark_property_paid,
    refresh_overdue_statuses,
)
from .duplicate_detection import find_duplicate
from .property_search import filter_properties, autocomplete_by_letter
from .offline_sync import apply_sync_operations

__all__ = [
    # Exceptions
    'PropertiesServiceError',
    'PropertyNotFoundError',
    'InvalidPropertyDataError',
    'DuplicatePropertyError',
    'SyncOperationError',
    # Services
    'create_property',
    'update_property',
    'delete_property',
    'mark_property_paid',
    'refresh_overdue_statuses',
    'find_duplicate',
    'filter_properties',
    'autocomplete_by_letter',
    'apply_sync_operations',
]
