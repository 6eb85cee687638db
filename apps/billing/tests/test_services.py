import pytest
from datetime import date
from decimal import Decimal
from django.db import connection
from apps.companies.models import Company, CompanyBoleto, MonthlyFee, BoletoStatus, FeeStatus
from apps.companies.services import InvalidBoletoStateError
from apps.billing.exceptions import BoletoValidationError, BoletoNotIssuedError, QRCodeUnavailableError
from apps.billing.services import (
    validate_boleto_data,
    build_boleto_payload,
    issue_company_boleto,
    cancel_company_boleto,
    refresh_boleto_status,
    apply_webhook_event,
    BoletoQRGenerator,
    INSTRUCTION_LINES,
)


VALID_DATA = {
    'beneficiary_name': 'Escritório Contábil',
    'cnpj': '11.222.333/0001-81',
    'amount': Decimal('150.00'),
    'due_date': date(2030, 1, 10),
    'payer_name': 'Padaria Pão Quente',
    'payer_email': 'padaria@example.com',
}


# =============================================================================
# Validation
# =============================================================================

class TestValidateBoletoData:

    def test_valid_data(self):
        assert validate_boleto_data(VALID_DATA) == {'valid': True, 'errors': []}

    def test_collects_every_error(self):
        result = validate_boleto_data({
            'beneficiary_name': '',
            'cnpj': '123',
            'amount': 0,
            'due_date': None,
            'payer_name': '',
            'payer_email': 'sem-arroba',
        })

        assert result['valid'] is False
        assert result['errors'] == [
            'Nome do beneficiário é obrigatório',
            'CNPJ inválido',
            'Valor deve ser maior que 0',
            'Data de vencimento é obrigatória',
            'Nome do pagador é obrigatório',
            'Email do pagador inválido',
        ]

    def test_non_numeric_amount(self):
        result = validate_boleto_data({**VALID_DATA, 'amount': 'abc'})

        assert result['errors'] == ['Valor deve ser maior que 0']


# =============================================================================
# Issuing
# =============================================================================

@pytest.mark.django_db
class TestIssueCompanyBoleto:

    def test_payload_built_from_company_and_settings(self, company):
        payload = build_boleto_payload(
            company=company,
            amount=Decimal('150.00'),
            due_date=date(2030, 3, 10),
        )

        assert payload['amount'] == 15000
        assert payload['due_date'] == '2030-03-10'
        assert payload['payer']['document'] == company.cnpj
        assert payload['payer']['email'] == 'financeiro@padaria.example.com'
        assert payload['beneficiary'] == {'name': 'Escritório Contábil Exemplo', 'document': '11444777000161'}
        assert payload['instruction_lines'] == INSTRUCTION_LINES

    def test_issue_records_remote_fields(self, company, fake_cora):
        boleto = issue_company_boleto(company=company, due_date=date(2030, 3, 10), client=fake_cora)

        assert boleto.external_id == 'bol_new001'
        assert boleto.boleto_number == '000456'
        assert boleto.amount == Decimal('150.00')
        assert boleto.status == BoletoStatus.PENDING
        assert boleto.pix_emv.startswith('000201')
        assert fake_cora.create_boleto.call_args.args[0]['amount'] == 15000

    def test_issue_generates_number_when_cora_sends_none(self, company, fake_cora, cora_created_payload):
        fake_cora.create_boleto.return_value = {**cora_created_payload, 'boleto_number': ''}

        boleto = issue_company_boleto(company=company, due_date=date(2030, 3, 10), client=fake_cora)

        assert boleto.boleto_number.isdigit()

    def test_issue_refuses_company_without_email(self, owner, fake_cora):
        company = Company.objects.create(user=owner, name='Sem Email', cnpj='11222333000181')

        with pytest.raises(BoletoValidationError) as exc_info:
            issue_company_boleto(
                company=company,
                amount=Decimal('10.00'),
                due_date=date(2030, 3, 10),
                client=fake_cora,
            )

        assert 'Email do pagador inválido' in exc_info.value.errors
        fake_cora.create_boleto.assert_not_called()

    def test_issue_refuses_missing_beneficiary(self, company, fake_cora, settings):
        settings.BOLETO_BENEFICIARY_NAME = ''

        with pytest.raises(BoletoValidationError):
            issue_company_boleto(company=company, due_date=date(2030, 3, 10), client=fake_cora)

        assert not CompanyBoleto.objects.exists()


# =============================================================================
# Cancel / Refresh
# =============================================================================

@pytest.mark.django_db
class TestRemoteLifecycle:

    def test_cancel_remote_then_local(self, owner, remote_boleto, fake_cora):
        boleto = cancel_company_boleto(boleto_id=remote_boleto.id, user=owner, notes='Duplicado', client=fake_cora)

        fake_cora.cancel_boleto.assert_called_once_with('bol_abc123')
        assert boleto.status == BoletoStatus.CANCELLED

    def test_cancel_local_only_skips_cora(self, owner, local_boleto, fake_cora):
        cancel_company_boleto(boleto_id=local_boleto.id, user=owner, client=fake_cora)

        fake_cora.cancel_boleto.assert_not_called()

    def test_cancel_paid_boleto_fails_before_cora(self, owner, remote_boleto, fake_cora):
        CompanyBoleto.objects.filter(id=remote_boleto.id).update(status=BoletoStatus.PAID)

        with pytest.raises(InvalidBoletoStateError):
            cancel_company_boleto(boleto_id=remote_boleto.id, user=owner, client=fake_cora)

        fake_cora.cancel_boleto.assert_not_called()

    def test_refresh_applies_paid_status(self, owner, remote_boleto, fake_cora, cora_created_payload):
        fake_cora.get_boleto.return_value = {
            **cora_created_payload,
            'id': 'bol_abc123',
            'status': 'PAID',
            'paid_at': '2030-01-08T14:30:00Z',
        }

        boleto = refresh_boleto_status(boleto_id=remote_boleto.id, user=owner, client=fake_cora)

        assert boleto.status == BoletoStatus.PAID
        assert boleto.payment_date == date(2030, 1, 8)
        assert boleto.pix_emv == cora_created_payload['pix_emv']

    def test_refresh_calls_cora_outside_transaction(self, owner, remote_boleto, fake_cora, cora_created_payload):
        outer_depth = len(connection.savepoint_ids)
        depth_during_call = []

        def remote_boleto_payload(external_id):
            depth_during_call.append(len(connection.savepoint_ids))
            return {**cora_created_payload, 'id': external_id, 'status': 'OPEN'}

        fake_cora.get_boleto.side_effect = remote_boleto_payload

        refresh_boleto_status(boleto_id=remote_boleto.id, user=owner, client=fake_cora)

        assert depth_during_call == [outer_depth]

    def test_refresh_keeps_boleto_paid_meanwhile(self, owner, remote_boleto, fake_cora, cora_created_payload):
        def pay_during_request(external_id):
            CompanyBoleto.objects.filter(id=remote_boleto.id).update(
                status=BoletoStatus.PAID, payment_date=date(2030, 1, 5),
            )
            return {**cora_created_payload, 'id': external_id, 'status': 'OPEN'}

        fake_cora.get_boleto.side_effect = pay_during_request

        boleto = refresh_boleto_status(boleto_id=remote_boleto.id, user=owner, client=fake_cora)

        assert boleto.status == BoletoStatus.PAID

    def test_refresh_local_only_boleto(self, owner, local_boleto, fake_cora):
        with pytest.raises(BoletoNotIssuedError):
            refresh_boleto_status(boleto_id=local_boleto.id, user=owner, client=fake_cora)


# =============================================================================
# Webhook Events
# =============================================================================

@pytest.mark.django_db
class TestApplyWebhookEvent:

    def test_paid_event(self, remote_boleto):
        boleto = apply_webhook_event({
            'type': 'boleto.paid',
            'data': {'id': 'bol_abc123', 'paid_date': '2030-01-09'},
        })

        assert boleto.id == remote_boleto.id
        remote_boleto.refresh_from_db()
        assert remote_boleto.status == BoletoStatus.PAID
        assert remote_boleto.payment_date == date(2030, 1, 9)

    def test_paid_event_settles_linked_fee(self, company, remote_boleto):
        fee = MonthlyFee.objects.create(
            company=company, year=2030, month=1, amount=Decimal('150.00'), due_date=date(2030, 1, 10),
        )
        CompanyBoleto.objects.filter(id=remote_boleto.id).update(monthly_fee=fee)

        apply_webhook_event({'type': 'boleto.paid', 'data': {'id': 'bol_abc123'}})

        fee.refresh_from_db()
        assert fee.status == FeeStatus.PAGO

    def test_overdue_event(self, remote_boleto):
        apply_webhook_event({'type': 'boleto.overdue', 'data': {'id': 'bol_abc123'}})

        remote_boleto.refresh_from_db()
        assert remote_boleto.status == BoletoStatus.OVERDUE

    def test_overdue_event_does_not_reopen_paid_boleto(self, remote_boleto):
        CompanyBoleto.objects.filter(id=remote_boleto.id).update(status=BoletoStatus.PAID)

        apply_webhook_event({'type': 'boleto.overdue', 'data': {'id': 'bol_abc123'}})

        remote_boleto.refresh_from_db()
        assert remote_boleto.status == BoletoStatus.PAID

    def test_unknown_event_type_ignored(self, remote_boleto):
        assert apply_webhook_event({'type': 'boleto.viewed', 'data': {'id': 'bol_abc123'}}) is None

    def test_unknown_boleto_ignored(self, db):
        assert apply_webhook_event({'type': 'boleto.paid', 'data': {'id': 'bol_missing'}}) is None


# =============================================================================
# QR Codes
# =============================================================================

@pytest.mark.django_db
class TestBoletoQRGenerator:

    def test_prefers_pix_emv(self, remote_boleto):
        remote_boleto.pix_emv = '000201pix'

        assert BoletoQRGenerator.qr_payload(remote_boleto) == '000201pix'

    def test_falls_back_to_digitable_line(self, remote_boleto):
        assert BoletoQRGenerator.qr_payload(remote_boleto) == remote_boleto.digitable_line

    def test_render_png(self, remote_boleto):
        png = BoletoQRGenerator.render_png(remote_boleto)

        assert png.startswith(b'\x89PNG')

    def test_unavailable_without_data(self, local_boleto):
        with pytest.raises(QRCodeUnavailableError):
            BoletoQRGenerator.render_png(local_boleto)
