"""
Validators for Brazilian documents and contact data.

The ``validate_*`` functions return an error message (Portuguese, shown to
end users) or ``None`` when the value is acceptable. Empty values are
accepted; "required" is enforced by the serializer field, not here.

The ``*_validator`` wrappers raise ``django.core.exceptions.ValidationError``
so they can be attached to model or serializer fields.
"""

import re
from typing import Optional

from django.core.exceptions import ValidationError
from django.core.validators import validate_email as django_validate_email


def only_digits(value) -> str:
    """Strip everything but 0-9 from value."""
    if value is None:
        return ''
    return re.sub(r'\D', '', str(value))


def _check_digit(digits: str, weights) -> int:
    total = sum(int(d) * w for d, w in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cpf(value) -> Optional[str]:
    """
    Validate a CPF (11 digits, two mod-11 check digits).

    Repeated-digit sequences such as 111.111.111-11 pass the checksum but
    are not issued, so they are rejected.
    """
    if not value:
        return None

    cpf = only_digits(value)
    if len(cpf) != 11:
        return 'CPF deve ter 11 dígitos'
    if cpf == cpf[0] * 11:
        return 'CPF inválido'

    first = _check_digit(cpf[:9], range(10, 1, -1))
    second = _check_digit(cpf[:10], range(11, 1, -1))
    if cpf[9:] != f'{first}{second}':
        return 'CPF inválido'
    return None


def validate_cnpj(value) -> Optional[str]:
    """Validate a CNPJ (14 digits, two weighted mod-11 check digits)."""
    if not value:
        return None

    cnpj = only_digits(value)
    if len(cnpj) != 14:
        return 'CNPJ deve ter 14 dígitos'
    if cnpj == cnpj[0] * 14:
        return 'CNPJ inválido'

    first = _check_digit(cnpj[:12], [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2])
    second = _check_digit(cnpj[:13], [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2])
    if cnpj[12:] != f'{first}{second}':
        return 'CNPJ inválido'
    return None


def validate_phone(value) -> Optional[str]:
    """Landline (10 digits) or mobile (11 digits) with a valid area code."""
    if not value:
        return None

    phone = only_digits(value)
    if len(phone) not in (10, 11):
        return 'Telefone deve ter 10 ou 11 dígitos'

    area_code = int(phone[:2])
    if area_code < 11 or area_code > 99:
        return 'DDD inválido'
    return None


def validate_email(value) -> Optional[str]:
    if not value:
        return None
    try:
        django_validate_email(value)
    except ValidationError:
        return 'Email inválido'
    return None


def cpf_validator(value):
    error = validate_cpf(value)
    if error:
        raise ValidationError(error)


def cnpj_validator(value):
    error = validate_cnpj(value)
    if error:
        raise ValidationError(error)


def phone_validator(value):
    error = validate_phone(value)
    if error:
        raise ValidationError(error)
