"""Local boleto records and their status transitions."""

from datetime import date
from decimal import Decimal
from typing import Optional
import logging
import secrets
import time

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.sanitization import sanitize_input
from ..models import Company, CompanyBoleto, BoletoStatus, FeeStatus
from .exceptions import (
    BoletoNotFoundError,
    InvalidBoletoStateError,
    InvalidCompanyDataError,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('amount', 'due_date', 'notes')


def generate_boleto_number() -> str:
    """Millisecond timestamp followed by a random suffix below 1000."""
    return f"{int(time.time() * 1000)}{secrets.randbelow(1000)}"


def boletos_for_user(user):
    return (
        CompanyBoleto.objects
        .select_related('company')
        .filter(company__user=user, company__deleted_at__isnull=True)
    )


def get_boleto(*, boleto_id, user, for_update=False) -> CompanyBoleto:
    queryset = boletos_for_user(user)
    if for_update:
        queryset = queryset.select_for_update(of=('self',))
    try:
        return queryset.get(id=boleto_id)
    except (CompanyBoleto.DoesNotExist, ValueError, TypeError, ValidationError):
        raise BoletoNotFoundError(f"Boleto {boleto_id} não encontrado")


def _ensure_open(boleto: CompanyBoleto, action: str) -> None:
    if boleto.is_final:
        raise InvalidBoletoStateError(
            f"Boleto {boleto.get_status_display().lower()} não pode ser {action}"
        )


def _validate_and_save(boleto: CompanyBoleto) -> CompanyBoleto:
    try:
        boleto.full_clean(exclude=['company', 'monthly_fee'])
    except ValidationError as e:
        raise InvalidCompanyDataError(e.message_dict)
    boleto.save()
    return boleto


@transaction.atomic
def create_local_boleto(
    *,
    company: Company,
    due_date: date,
    amount: Optional[Decimal] = None,
    notes: str = '',
    monthly_fee=None,
    **remote_fields,
) -> CompanyBoleto:
    """
    Record a boleto for ``company``.

    Without a number in ``remote_fields`` one is generated; issue date is
    today and status ``pending``. ``remote_fields`` carries the Cora data
    (external_id, barcode, digitable_line, pdf_url, pix_emv) when the slip
    was issued remotely.
    """
    boleto = CompanyBoleto(
        company=company,
        monthly_fee=monthly_fee,
        amount=company.boleto_amount if amount is None else amount,
        due_date=due_date,
        issue_date=timezone.localdate(),
        status=BoletoStatus.PENDING,
        notes=sanitize_input(notes or ''),
        **remote_fields,
    )
    if not boleto.boleto_number:
        boleto.boleto_number = generate_boleto_number()

    _validate_and_save(boleto)
    logger.info("Boleto %s created for company %s (%s)", boleto.boleto_number, company.id, boleto.amount)
    return boleto


@transaction.atomic
def update_boleto(*, boleto_id, user, data: dict) -> CompanyBoleto:
    """Change amount, due date or notes of an open boleto."""
    boleto = get_boleto(boleto_id=boleto_id, user=user, for_update=True)
    _ensure_open(boleto, 'alterado')

    for field in EDITABLE_FIELDS:
        if field in data:
            value = data[field]
            setattr(boleto, field, sanitize_input(value) if field == 'notes' else value)

    _validate_and_save(boleto)
    logger.info("Boleto %s updated by user %s", boleto.id, user.id)
    return boleto


def settle_boleto(boleto: CompanyBoleto, payment_date: date = None) -> CompanyBoleto:
    """
    Mark ``boleto`` paid and, when it belongs to a monthly fee, that fee too.

    The caller owns the transaction and any state checks.
    """
    boleto.status = BoletoStatus.PAID
    boleto.payment_date = payment_date or timezone.localdate()
    boleto.save(update_fields=['status', 'payment_date', 'updated_at'])

    fee = boleto.monthly_fee
    if fee is not None and fee.status != FeeStatus.PAGO:
        fee.status = FeeStatus.PAGO
        fee.paid_at = timezone.now()
        fee.save(update_fields=['status', 'paid_at', 'updated_at'])

    return boleto


@transaction.atomic
def mark_boleto_paid(*, boleto_id, user, payment_date: date = None) -> CompanyBoleto:
    """
    Raises:
        BoletoNotFoundError: If the boleto is not the user's
        InvalidBoletoStateError: If it is already paid or cancelled
    """
    boleto = get_boleto(boleto_id=boleto_id, user=user, for_update=True)
    _ensure_open(boleto, 'marcado como pago')
    settle_boleto(boleto, payment_date)
    logger.info("Boleto %s marked as paid on %s", boleto.id, boleto.payment_date)
    return boleto


@transaction.atomic
def mark_boleto_sent(*, boleto_id, user, email: str) -> CompanyBoleto:
    boleto = get_boleto(boleto_id=boleto_id, user=user, for_update=True)
    _ensure_open(boleto, 'enviado')

    boleto.status = BoletoStatus.SENT
    boleto.sent_date = timezone.now()
    boleto.sent_to_email = email
    boleto.save(update_fields=['status', 'sent_date', 'sent_to_email', 'updated_at'])

    logger.info("Boleto %s sent to %s", boleto.id, email)
    return boleto


@transaction.atomic
def cancel_boleto(*, boleto_id, user, notes: str = '') -> CompanyBoleto:
    boleto = get_boleto(boleto_id=boleto_id, user=user, for_update=True)
    _ensure_open(boleto, 'cancelado')

    boleto.status = BoletoStatus.CANCELLED
    if notes:
        boleto.notes = sanitize_input(notes)
    boleto.save(update_fields=['status', 'notes', 'updated_at'])

    logger.info("Boleto %s cancelled by user %s", boleto.id, user.id)
    return boleto
