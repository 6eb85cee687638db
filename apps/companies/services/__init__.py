"""Services for client companies, monthly fees, boletos and schedules."""

from .exceptions import (
    CompaniesServiceError,
    CompanyNotFoundError,
    InvalidCompanyDataError,
    FeeNotFoundError,
    BoletoNotFoundError,
    InvalidBoletoStateError,
    ScheduleNotFoundError,
)
from .company_management import (
    companies_for_user,
    get_company,
    create_company,
    update_company,
    delete_company,
)
from .monthly_fees import (
    default_due_date,
    set_monthly_fee,
    mark_fee_paid,
    fee_totals,
    year_overview,
)
from .boleto_management import (
    generate_boleto_number,
    boletos_for_user,
    get_boleto,
    create_local_boleto,
    update_boleto,
    settle_boleto,
    mark_boleto_paid,
    mark_boleto_sent,
    cancel_boleto,
)
from .schedules import get_schedule, upsert_schedule, delete_schedule

__all__ = [
    # Exceptions
    'CompaniesServiceError',
    'CompanyNotFoundError',
    'InvalidCompanyDataError',
    'FeeNotFoundError',
    'BoletoNotFoundError',
    'InvalidBoletoStateError',
    'ScheduleNotFoundError',
    # Companies
    'companies_for_user',
    'get_company',
    'create_company',
    'update_company',
    'delete_company',
    # Monthly fees
    'default_due_date',
    'set_monthly_fee',
    'mark_fee_paid',
    'fee_totals',
    'year_overview',
    # Boletos
    'generate_boleto_number',
    'boletos_for_user',
    'get_boleto',
    'create_local_boleto',
    'update_boleto',
    'settle_boleto',
    'mark_boleto_paid',
    'mark_boleto_sent',
    'cancel_boleto',
    # Schedules
    'get_schedule',
    'upsert_schedule',
    'delete_schedule',
]
