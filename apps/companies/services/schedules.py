"""Boleto schedule of a company: day and time the monthly slip goes out."""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from ..models import Company, BoletoSchedule
from .exceptions import ScheduleNotFoundError, InvalidCompanyDataError

logger = logging.getLogger(__name__)

SCHEDULE_FIELDS = ('schedule_day', 'schedule_time', 'is_active')


def get_schedule(*, company: Company) -> BoletoSchedule:
    try:
        return company.boleto_schedule
    except BoletoSchedule.DoesNotExist:
        raise ScheduleNotFoundError(f"Empresa {company.id} não possui agendamento")


@transaction.atomic
def upsert_schedule(*, company: Company, data: dict) -> BoletoSchedule:
    """Create the schedule or update the existing one with the given fields."""
    schedule = (
        BoletoSchedule.objects
        .select_for_update()
        .filter(company=company)
        .first()
    ) or BoletoSchedule(company=company)

    for field in SCHEDULE_FIELDS:
        if field in data:
            setattr(schedule, field, data[field])

    try:
        schedule.full_clean(exclude=['company'], validate_unique=False)
    except ValidationError as e:
        raise InvalidCompanyDataError(e.message_dict)
    schedule.save()

    logger.info("Boleto schedule of company %s set to day %d", company.id, schedule.schedule_day)
    return schedule


@transaction.atomic
def delete_schedule(*, company: Company) -> None:
    deleted, _ = BoletoSchedule.objects.filter(company=company).delete()
    if not deleted:
        raise ScheduleNotFoundError(f"Empresa {company.id} não possui agendamento")
    logger.info("Boleto schedule of company %s removed", company.id)
