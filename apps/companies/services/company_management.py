"""Create, update and soft-delete client companies."""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Max

from apps.core.sanitization import sanitize_data
from apps.core.validators import only_digits
from ..models import Company
from .exceptions import CompanyNotFoundError, InvalidCompanyDataError

logger = logging.getLogger(__name__)

WRITABLE_FIELDS = (
    'name',
    'cnpj',
    'regime_type',
    'email',
    'phone',
    'contact_person',
    'contact_email',
    'contact_phone',
    'boleto_day',
    'boleto_amount',
    'is_active',
)
DIGIT_FIELDS = ('cnpj', 'phone', 'contact_phone')


def prepare_company_data(data: dict) -> dict:
    """Keep writable fields, sanitize text and strip masks from CNPJ/phones."""
    cleaned = sanitize_data({k: v for k, v in data.items() if k in WRITABLE_FIELDS})
    for field in DIGIT_FIELDS:
        if field in cleaned:
            cleaned[field] = only_digits(cleaned[field])
    for field, value in cleaned.items():
        if value is None:
            cleaned[field] = ''
    return cleaned


def _validate_and_save(company: Company) -> Company:
    try:
        company.full_clean(exclude=['user'])
    except ValidationError as e:
        raise InvalidCompanyDataError(e.message_dict)
    company.save()
    return company


def companies_for_user(user):
    """Live companies of ``user``, newest first, annotated with ``last_boleto_date``."""
    return (
        Company.objects
        .alive()
        .filter(user=user)
        .annotate(last_boleto_date=Max('boletos__issue_date'))
        .order_by('-created_at')
    )


def get_company(*, company_id, user, for_update=False) -> Company:
    queryset = Company.objects.alive().filter(user=user)
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(id=company_id)
    except (Company.DoesNotExist, ValueError, TypeError, ValidationError):
        raise CompanyNotFoundError(f"Empresa {company_id} não encontrada")


@transaction.atomic
def create_company(*, user, data: dict) -> Company:
    """
    Register a client company for ``user``.

    Raises:
        InvalidCompanyDataError: If the data fails model validation
    """
    company = Company(user=user, **prepare_company_data(data))
    _validate_and_save(company)
    logger.info("Company %s (%s) created by user %s", company.id, company.name, user.id)
    return company


@transaction.atomic
def update_company(*, company_id, user, data: dict) -> Company:
    """Apply a (partial) update to a live company."""
    company = get_company(company_id=company_id, user=user, for_update=True)
    for field, value in prepare_company_data(data).items():
        setattr(company, field, value)
    _validate_and_save(company)
    logger.info("Company %s updated by user %s", company.id, user.id)
    return company


@transaction.atomic
def delete_company(*, company_id, user) -> None:
    """Soft delete: the row stays, with ``deleted_at`` set, and drops out of every listing."""
    company = get_company(company_id=company_id, user=user, for_update=True)
    company.soft_delete()
    logger.info("Company %s soft-deleted by user %s", company.id, user.id)
