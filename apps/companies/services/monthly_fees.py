"""Monthly fee control: per-month fees, payment and the yearly overview."""

from calendar import monthrange
from datetime import date
from decimal import Decimal
from typing import Optional
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..models import Company, MonthlyFee, FeeStatus, FEE_STATUS_ATRASADO
from .exceptions import FeeNotFoundError, InvalidCompanyDataError

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    'Janeiro', 'Fevereiro', 'Março', 'Abril', 'Maio', 'Junho',
    'Julho', 'Agosto', 'Setembro', 'Outubro', 'Novembro', 'Dezembro',
)


def default_due_date(company: Company, year: int, month: int) -> date:
    """The company's boleto day in the given month, clamped to the month's last day."""
    last_day = monthrange(year, month)[1]
    return date(year, month, min(company.boleto_day, last_day))


@transaction.atomic
def set_monthly_fee(
    *,
    company: Company,
    year: int,
    month: int,
    amount: Optional[Decimal] = None,
    due_date: Optional[date] = None,
) -> MonthlyFee:
    """
    Add or replace the fee of ``company`` for ``month``/``year``.

    Amount defaults to the company's ``boleto_amount`` and the due date to
    :func:`default_due_date`. Replacing a fee keeps its payment status.
    """
    if not 1 <= month <= 12:
        raise InvalidCompanyDataError({'month': ['Mês deve estar entre 1 e 12']})

    fee = (
        MonthlyFee.objects
        .select_for_update()
        .filter(company=company, year=year, month=month)
        .first()
    )
    if fee is None:
        fee = MonthlyFee(company=company, year=year, month=month)

    fee.amount = company.boleto_amount if amount is None else amount
    fee.due_date = due_date or default_due_date(company, year, month)

    try:
        fee.full_clean(exclude=['company'], validate_unique=False)
    except ValidationError as e:
        raise InvalidCompanyDataError(e.message_dict)
    fee.save()

    logger.info("Fee %02d/%d set for company %s: %s", month, year, company.id, fee.amount)
    return fee


@transaction.atomic
def mark_fee_paid(*, company: Company, year: int, month: int, paid_at=None) -> MonthlyFee:
    """
    Mark the fee of ``month``/``year`` as paid.

    Raises:
        FeeNotFoundError: If no fee is registered for that month
    """
    try:
        fee = MonthlyFee.objects.select_for_update().get(company=company, year=year, month=month)
    except MonthlyFee.DoesNotExist:
        raise FeeNotFoundError(f"Nenhuma mensalidade em {month:02d}/{year}")

    fee.status = FeeStatus.PAGO
    fee.paid_at = paid_at or timezone.now()
    fee.save(update_fields=['status', 'paid_at', 'updated_at'])

    logger.info("Fee %02d/%d of company %s marked as paid", month, year, company.id)
    return fee


def fee_totals(fees, today: date = None) -> dict:
    """
    Paid, pending and overdue sums over ``fees``.

    ``pending`` includes overdue fees; ``overdue`` is the part of it past due.
    """
    today = today or timezone.localdate()
    totals = {
        'paid': Decimal('0.00'),
        'pending': Decimal('0.00'),
        'overdue': Decimal('0.00'),
        'paid_count': 0,
        'pending_count': 0,
        'overdue_count': 0,
    }
    for fee in fees:
        status = fee.display_status(today)
        if status == FeeStatus.PAGO:
            totals['paid'] += fee.amount
            totals['paid_count'] += 1
            continue
        totals['pending'] += fee.amount
        totals['pending_count'] += 1
        if status == FEE_STATUS_ATRASADO:
            totals['overdue'] += fee.amount
            totals['overdue_count'] += 1
    return totals


def year_overview(*, company: Company, year: int, today: date = None) -> dict:
    """
    Twelve-month view of a company's fees.

    Months without a registered fee come back with ``fee`` and ``status``
    set to ``None``.
    """
    today = today or timezone.localdate()
    fees = {fee.month: fee for fee in company.monthly_fees.filter(year=year)}

    months = []
    for month in range(1, 13):
        fee = fees.get(month)
        months.append({
            'month': month,
            'label': MONTH_NAMES[month - 1],
            'fee': fee,
            'status': fee.display_status(today) if fee else None,
        })

    return {
        'company_id': company.id,
        'year': year,
        'months': months,
        'totals': fee_totals(fees.values(), today),
    }
