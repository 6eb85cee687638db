"""Create, update and delete rural property records."""

from datetime import date
from typing import Optional
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.sanitization import sanitize_data
from apps.core.validators import only_digits
from ..models import RuralProperty, PaymentStatus
from .duplicate_detection import find_duplicate
from .exceptions import (
    PropertyNotFoundError,
    InvalidPropertyDataError,
    DuplicatePropertyError,
)

logger = logging.getLogger(__name__)

WRITABLE_FIELDS = (
    'owner_name',
    'farm_name',
    'address',
    'cpf',
    'phone',
    'ccir',
    'itr',
    'amount',
    'due_date',
    'payment_status',
    'payment_date',
)
NULLABLE_FIELDS = ('amount', 'due_date', 'payment_date')
DIGIT_FIELDS = ('cpf', 'phone')


def prepare_property_data(data: dict) -> dict:
    """
    Reduce raw input to writable fields, sanitized and normalized.

    Unknown keys (ids, timestamps sent back by clients) are dropped, text is
    sanitized, CPF/phone become digits only and blank nullable values
    become ``None``.
    """
    cleaned = sanitize_data({k: v for k, v in data.items() if k in WRITABLE_FIELDS})

    for field in DIGIT_FIELDS:
        if field in cleaned:
            cleaned[field] = only_digits(cleaned[field])

    for field in NULLABLE_FIELDS:
        if field in cleaned and cleaned[field] in ('', None):
            cleaned[field] = None

    for field, value in cleaned.items():
        if value is None and field not in NULLABLE_FIELDS:
            cleaned[field] = ''

    return cleaned


def _validate_and_save(instance: RuralProperty) -> RuralProperty:
    try:
        instance.full_clean(exclude=['user'])
    except ValidationError as e:
        raise InvalidPropertyDataError(e.message_dict)
    instance.save()
    return instance


def _get_owned_for_update(property_id, user) -> RuralProperty:
    try:
        return (
            RuralProperty.objects
            .select_for_update()
            .get(id=property_id, user=user)
        )
    except (RuralProperty.DoesNotExist, ValueError, TypeError):
        raise PropertyNotFoundError(f"Imóvel {property_id} não encontrado")


@transaction.atomic
def create_property(*, user, data: dict, check_duplicates: bool = False) -> RuralProperty:
    """
    Create a property owned by user.

    Args:
        user: Owner of the new record
        data: Field values (raw or already validated)
        check_duplicates: Refuse to create when a matching record exists

    Raises:
        InvalidPropertyDataError: If the data fails validation
        DuplicatePropertyError: If check_duplicates is set and a match exists
    """
    cleaned = prepare_property_data(data)

    if check_duplicates:
        existing = find_duplicate(
            user=user,
            cpf=cleaned.get('cpf'),
            owner_name=cleaned.get('owner_name'),
            farm_name=cleaned.get('farm_name'),
        )
        if existing is not None:
            raise DuplicatePropertyError(existing)

    instance = _validate_and_save(RuralProperty(user=user, **cleaned))
    logger.info("Created property %s for user %s", instance.id, user.id)
    return instance


@transaction.atomic
def update_property(*, property_id, user, data: dict) -> RuralProperty:
    """
    Apply a partial update to one of user's properties.

    Raises:
        PropertyNotFoundError: If the property is missing or not owned by user
        InvalidPropertyDataError: If the resulting record fails validation
    """
    instance = _get_owned_for_update(property_id, user)

    for field, value in prepare_property_data(data).items():
        setattr(instance, field, value)

    return _validate_and_save(instance)


@transaction.atomic
def delete_property(*, property_id, user) -> None:
    """
    Raises:
        PropertyNotFoundError: If the property is missing or not owned by user
    """
    instance = _get_owned_for_update(property_id, user)
    instance.delete()
    logger.info("Deleted property %s for user %s", property_id, user.id)


@transaction.atomic
def mark_property_paid(*, property_id, user, payment_date: Optional[date] = None) -> RuralProperty:
    """Set status PAGO with the given payment date (today by default)."""
    instance = _get_owned_for_update(property_id, user)
    instance.payment_status = PaymentStatus.PAGO
    instance.payment_date = payment_date or timezone.localdate()
    instance.save(update_fields=['payment_status', 'payment_date', 'updated_at'])
    return instance


@transaction.atomic
def refresh_overdue_statuses(*, user, today: Optional[date] = None) -> int:
    """
    Flag user's PENDENTE records past their due date as ATRASADO.

    Returns:
        Number of records updated
    """
    today = today or timezone.localdate()
    updated = RuralProperty.objects.filter(
        user=user,
        payment_status=PaymentStatus.PENDENTE,
        due_date__lt=today,
    ).update(payment_status=PaymentStatus.ATRASADO, updated_at=timezone.now())

    if updated:
        logger.info("Marked %d properties overdue for user %s", updated, user.id)
    return updated
