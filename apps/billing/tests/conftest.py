import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import Mock
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.companies.models import Company, CompanyBoleto, RegimeType


VALID_CNPJ = '11222333000181'


@pytest.fixture(autouse=True)
def clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def beneficiary_settings(settings):
    """Beneficiary and webhook settings every billing test starts from."""
    settings.BOLETO_BENEFICIARY_NAME = 'Escritório Contábil Exemplo'
    settings.BOLETO_BENEFICIARY_DOCUMENT = '11.444.777/0001-61'
    settings.CORA_WEBHOOK_SECRET = ''
    return settings


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def owner(db):
    return User.objects.create_user(
        email='contador@example.com',
        password='TestPass123!',
        display_name='Contador',
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='outro@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def owner_client(owner):
    client = APIClient()
    refresh = RefreshToken.for_user(owner)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def company(owner):
    return Company.objects.create(
        user=owner,
        name='Padaria Pão Quente',
        cnpj=VALID_CNPJ,
        regime_type=RegimeType.MEI,
        email='padaria@example.com',
        contact_email='financeiro@padaria.example.com',
        phone='1133334444',
        boleto_day=10,
        boleto_amount=Decimal('150.00'),
    )


@pytest.fixture
def foreign_company(other_user):
    return Company.objects.create(
        user=other_user,
        name='Empresa Alheia',
        cnpj=VALID_CNPJ,
        email='alheia@example.com',
        boleto_amount=Decimal('99.00'),
    )


@pytest.fixture
def remote_boleto(company):
    """Boleto issued through Cora."""
    return CompanyBoleto.objects.create(
        company=company,
        boleto_number='000123',
        amount=Decimal('150.00'),
        due_date=date(2030, 1, 10),
        external_id='bol_abc123',
        digitable_line='23793381286000782713695000063305975520000015000',
        pdf_url='https://cora.example.com/boletos/bol_abc123.pdf',
    )


@pytest.fixture
def local_boleto(company):
    """Boleto recorded only locally (no Cora id, no barcode)."""
    return CompanyBoleto.objects.create(
        company=company,
        boleto_number='1700000000000321',
        amount=Decimal('150.00'),
        due_date=date(2030, 2, 10),
    )


@pytest.fixture
def cora_created_payload():
    """Normalized Cora response for a freshly issued boleto."""
    return {
        'id': 'bol_new001',
        'boleto_number': '000456',
        'barcode': '23791234500000150003381286000782713695000063',
        'digitable_line': '23793381286000782713695000063305975520000015000',
        'pdf_url': 'https://cora.example.com/boletos/bol_new001.pdf',
        'pix_emv': '00020126580014br.gov.bcb.pix0136cora-example',
        'amount': Decimal('150.00'),
        'due_date': '2030-03-10',
        'status': 'issued',
        'paid_at': None,
        'created_at': None,
    }


@pytest.fixture
def fake_cora(cora_created_payload):
    client = Mock()
    client.create_boleto.return_value = cora_created_payload
    client.get_boleto_pdf.return_value = b'%PDF-1.4 fake'
    client.cancel_boleto.return_value = {}
    return client
