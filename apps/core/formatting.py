"""Display formatting in the pt-BR conventions used by reports and exports."""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP

from .validators import only_digits


def format_cpf(value) -> str:
    """000.000.000-00; anything that is not 11 digits is returned as-is."""
    digits = only_digits(value)
    if len(digits) != 11:
        return value or ''
    return f'{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}'


def format_cnpj(value) -> str:
    digits = only_digits(value)
    if len(digits) != 14:
        return value or ''
    return f'{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:]}'


def format_phone(value) -> str:
    """(XX) XXXX-XXXX for landlines, (XX) XXXXX-XXXX for mobiles."""
    digits = only_digits(value)
    if len(digits) == 10:
        return f'({digits[:2]}) {digits[2:6]}-{digits[6:]}'
    if len(digits) == 11:
        return f'({digits[:2]}) {digits[2:7]}-{digits[7:]}'
    return value or ''


def format_currency(value) -> str:
    """
    Format a number as Brazilian reais, e.g. ``R$ 1.234,56``.

    ``None`` and empty strings render as ``R$ 0,00``.
    """
    if value in (None, ''):
        value = 0
    amount = Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    sign = '-' if amount < 0 else ''
    integer, fraction = f'{abs(amount):.2f}'.split('.')
    grouped = f'{int(integer):,}'.replace(',', '.')
    return f'{sign}R$ {grouped},{fraction}'


def format_date(value) -> str:
    """dd/mm/yyyy, or an empty string when there is no date."""
    if not value:
        return ''
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime('%d/%m/%Y')
