"""
Billing services: issuing company boletos through Cora and keeping the
local records in step with it.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from io import BytesIO
import logging

import qrcode
from django.conf import settings
from django.db import transaction
from django.utils.dateparse import parse_date, parse_datetime

from apps.core.validators import only_digits, validate_email
from apps.companies.models import CompanyBoleto, BoletoStatus
from apps.companies.services import (
    get_boleto,
    create_local_boleto,
    cancel_boleto as cancel_local_boleto,
    settle_boleto,
    InvalidBoletoStateError,
)
from .cora import get_client, to_centavos
from .exceptions import (
    BoletoValidationError,
    BoletoNotIssuedError,
    QRCodeUnavailableError,
)

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = 'Pagamento de Mensalidade'
INSTRUCTION_LINES = [
    'Pagamento até o vencimento',
    'Juros de 0.33% ao dia de atraso',
]

# Cora status -> local status
REMOTE_STATUS_MAP = {
    'issued': BoletoStatus.PENDING,
    'open': BoletoStatus.PENDING,
    'pending': BoletoStatus.PENDING,
    'paid': BoletoStatus.PAID,
    'overdue': BoletoStatus.OVERDUE,
    'late': BoletoStatus.OVERDUE,
    'cancelled': BoletoStatus.CANCELLED,
    'canceled': BoletoStatus.CANCELLED,
}

WEBHOOK_EVENT_STATUS = {
    'boleto.paid': BoletoStatus.PAID,
    'boleto.overdue': BoletoStatus.OVERDUE,
    'boleto.issued': BoletoStatus.PENDING,
}


def validate_boleto_data(data: dict) -> dict:
    """
    Check boleto data before it is sent to Cora.

    Expected keys: ``beneficiary_name``, ``cnpj`` (beneficiary), ``amount``,
    ``due_date``, ``payer_name`` and ``payer_email``.

    Returns:
        dict: ``{'valid': bool, 'errors': [str, ...]}``
    """
    errors = []

    if not data.get('beneficiary_name'):
        errors.append('Nome do beneficiário é obrigatório')
    if len(only_digits(data.get('cnpj'))) != 14:
        errors.append('CNPJ inválido')

    try:
        amount = Decimal(str(data.get('amount')))
    except (InvalidOperation, ValueError):
        amount = None
    if amount is None or not amount.is_finite() or amount <= 0:
        errors.append('Valor deve ser maior que 0')

    if not data.get('due_date'):
        errors.append('Data de vencimento é obrigatória')
    if not data.get('payer_name'):
        errors.append('Nome do pagador é obrigatório')

    payer_email = data.get('payer_email')
    if not payer_email or validate_email(payer_email):
        errors.append('Email do pagador inválido')

    return {'valid': not errors, 'errors': errors}


def build_boleto_payload(*, company, amount, due_date: date, description=DEFAULT_DESCRIPTION) -> dict:
    """Cora request body: the company pays, the configured beneficiary receives."""
    return {
        'amount': to_centavos(amount),
        'due_date': due_date.isoformat(),
        'description': description,
        'payer': {
            'name': company.name,
            'document': company.cnpj,
            'email': company.payer_email,
            'phone': company.payer_phone,
        },
        'beneficiary': {
            'name': settings.BOLETO_BENEFICIARY_NAME,
            'document': only_digits(settings.BOLETO_BENEFICIARY_DOCUMENT),
        },
        'instruction_lines': INSTRUCTION_LINES,
    }


def issue_company_boleto(
    *,
    company,
    due_date: date,
    amount=None,
    description=DEFAULT_DESCRIPTION,
    monthly_fee=None,
    client=None,
) -> CompanyBoleto:
    """
    Issue a boleto for ``company`` through Cora and record it locally.

    Amount defaults to the company's monthly ``boleto_amount``.

    Raises:
        BoletoValidationError: If the data would be rejected by Cora
        CoraAPIError / CoraNotConfiguredError: If Cora cannot issue it
    """
    amount = company.boleto_amount if amount is None else amount
    description = description or DEFAULT_DESCRIPTION

    check = validate_boleto_data({
        'beneficiary_name': settings.BOLETO_BENEFICIARY_NAME,
        'cnpj': settings.BOLETO_BENEFICIARY_DOCUMENT,
        'amount': amount,
        'due_date': due_date,
        'payer_name': company.name,
        'payer_email': company.payer_email,
    })
    if not check['valid']:
        raise BoletoValidationError(check['errors'])

    client = client or get_client()
    remote = client.create_boleto(
        build_boleto_payload(company=company, amount=amount, due_date=due_date, description=description)
    )

    try:
        boleto = create_local_boleto(
            company=company,
            due_date=due_date,
            amount=amount,
            notes=description,
            monthly_fee=monthly_fee,
            boleto_number=remote['boleto_number'] or '',
            external_id=remote['id'] or '',
            barcode=remote['barcode'],
            digitable_line=remote['digitable_line'],
            pdf_url=remote['pdf_url'],
            pix_emv=remote['pix_emv'],
        )
    except Exception:
        logger.error("Cora boleto %s issued but not recorded for company %s", remote['id'], company.id)
        raise

    logger.info("Boleto %s issued through Cora (%s) for company %s", boleto.id, boleto.external_id, company.id)
    return boleto


def _require_remote(boleto: CompanyBoleto) -> None:
    if not boleto.external_id:
        raise BoletoNotIssuedError(f"Boleto {boleto.boleto_number} não foi emitido pelo Cora")


def _payment_date(value):
    if not value:
        return None
    if isinstance(value, date):
        return value
    parsed = parse_datetime(str(value))
    if parsed is not None:
        return parsed.date()
    return parse_date(str(value)[:10])


def apply_remote_status(boleto: CompanyBoleto, status: str, paid_at=None) -> bool:
    """
    Move ``boleto`` to ``status`` as reported by Cora.

    Paid and cancelled boletos are final: later events never reopen them.
    Returns whether anything changed.
    """
    if boleto.status == status or boleto.is_final:
        return False

    if status == BoletoStatus.PAID:
        settle_boleto(boleto, _payment_date(paid_at))
    else:
        boleto.status = status
        boleto.save(update_fields=['status', 'updated_at'])

    logger.info("Boleto %s moved to %s by Cora", boleto.id, status)
    return True


def fetch_boleto_pdf(*, boleto_id, user, client=None) -> tuple:
    """Return ``(boleto, pdf_bytes)`` for a boleto issued through Cora."""
    boleto = get_boleto(boleto_id=boleto_id, user=user)
    _require_remote(boleto)
    client = client or get_client()
    return boleto, client.get_boleto_pdf(boleto.external_id)


def cancel_company_boleto(*, boleto_id, user, notes='', client=None) -> CompanyBoleto:
    """
    Cancel at Cora (when issued there) and then locally.

    Raises:
        InvalidBoletoStateError: If the boleto is already paid or cancelled
    """
    boleto = get_boleto(boleto_id=boleto_id, user=user)
    if boleto.is_final:
        raise InvalidBoletoStateError(
            f"Boleto {boleto.get_status_display().lower()} não pode ser cancelado"
        )

    if boleto.external_id:
        client = client or get_client()
        client.cancel_boleto(boleto.external_id)

    return cancel_local_boleto(boleto_id=boleto.id, user=user, notes=notes)


def refresh_boleto_status(*, boleto_id, user, client=None) -> CompanyBoleto:
    """
    Pull the boleto from Cora and apply its status and document fields.

    The Cora request runs before the row lock is taken; only the local
    update happens inside the transaction.
    """
    boleto = get_boleto(boleto_id=boleto_id, user=user)
    _require_remote(boleto)

    client = client or get_client()
    remote = client.get_boleto(boleto.external_id)

    with transaction.atomic():
        boleto = get_boleto(boleto_id=boleto_id, user=user, for_update=True)
        _apply_remote_boleto(boleto, remote)
    return boleto


def _apply_remote_boleto(boleto, remote: dict):
    changed_fields = []
    for field in ('barcode', 'digitable_line', 'pdf_url', 'pix_emv'):
        if remote.get(field) and remote[field] != getattr(boleto, field):
            setattr(boleto, field, remote[field])
            changed_fields.append(field)
    if changed_fields:
        boleto.save(update_fields=changed_fields + ['updated_at'])

    status = REMOTE_STATUS_MAP.get(str(remote.get('status', '')).lower())
    if status:
        apply_remote_status(boleto, status, remote.get('paid_at'))
    else:
        logger.warning("Unknown Cora status '%s' for boleto %s", remote.get('status'), boleto.id)

    return boleto


@transaction.atomic
def apply_webhook_event(event: dict):
    """
    Apply a Cora webhook event to the matching local boleto.

    ``boleto.paid`` marks it paid (with the payment date), ``boleto.overdue``
    overdue and ``boleto.issued`` pending. Boletos are matched by
    ``external_id``.

    Returns:
        CompanyBoleto | None: The boleto, or None for unknown event types
        and unknown boletos.
    """
    event_type = event.get('type')
    status = WEBHOOK_EVENT_STATUS.get(event_type)
    if status is None:
        logger.warning("Ignoring unknown Cora event '%s'", event_type)
        return None

    data = event.get('data') or {}
    external_id = data.get('id')
    boleto = None
    if external_id:
        boleto = (
            CompanyBoleto.objects
            .select_for_update()
            .filter(external_id=str(external_id))
            .first()
        )
    if boleto is None:
        logger.warning("Cora event %s for unknown boleto '%s'", event_type, external_id)
        return None

    paid_at = data.get('paid_date') or data.get('paidDate') or data.get('paid_at')
    apply_remote_status(boleto, status, paid_at)
    return boleto


class BoletoQRGenerator:
    """
    Render a boleto as a QR code PNG.

    The QR carries the Pix EMV ("copia e cola") when Cora returned one,
    otherwise the digitable line.
    """

    @staticmethod
    def qr_payload(boleto: CompanyBoleto) -> str:
        payload = boleto.pix_emv or boleto.digitable_line
        if not payload:
            raise QRCodeUnavailableError(f"Boleto {boleto.boleto_number} não possui Pix nem linha digitável")
        return payload

    @staticmethod
    def generate_qr_image(data: str):
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(data)
        qr.make(fit=True)
        return qr.make_image(fill_color="black", back_color="white")

    @classmethod
    def render_png(cls, boleto: CompanyBoleto) -> bytes:
        buffer = BytesIO()
        cls.generate_qr_image(cls.qr_payload(boleto)).save(buffer, format='PNG')
        return buffer.getvalue()
