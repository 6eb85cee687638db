import pytest
from datetime import date
from decimal import Decimal
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.companies.models import Company, CompanyBoleto, MonthlyFee, RegimeType, BoletoStatus


VALID_CNPJ = '11222333000181'
OTHER_VALID_CNPJ = '11444777000161'


@pytest.fixture(autouse=True)
def clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
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
        display_name='Outro Contador',
    )


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def owner_client(owner):
    """Return API client authenticated as the company owner."""
    return _client_for(owner)


@pytest.fixture
def other_client(other_user):
    return _client_for(other_user)


@pytest.fixture
def company(owner):
    """MEI billed R$ 150,00 on the 10th."""
    return Company.objects.create(
        user=owner,
        name='Padaria Pão Quente',
        cnpj=VALID_CNPJ,
        regime_type=RegimeType.MEI,
        email='padaria@example.com',
        phone='1133334444',
        contact_person='Carlos',
        contact_email='carlos@example.com',
        boleto_day=10,
        boleto_amount=Decimal('150.00'),
    )


@pytest.fixture
def simples_company(owner):
    """Simples Nacional company billed on the 31st."""
    return Company.objects.create(
        user=owner,
        name='Oficina Mecânica Silva',
        cnpj=OTHER_VALID_CNPJ,
        regime_type=RegimeType.SIMPLES_NACIONAL,
        boleto_day=31,
        boleto_amount=Decimal('450.00'),
    )


@pytest.fixture
def foreign_company(other_user):
    return Company.objects.create(
        user=other_user,
        name='Empresa Alheia',
        cnpj=VALID_CNPJ,
        boleto_amount=Decimal('99.00'),
    )


@pytest.fixture
def fee(company):
    """Unpaid January 2020 fee (long past due)."""
    return MonthlyFee.objects.create(
        company=company,
        year=2020,
        month=1,
        amount=Decimal('150.00'),
        due_date=date(2020, 1, 10),
    )


@pytest.fixture
def boleto(company):
    return CompanyBoleto.objects.create(
        company=company,
        boleto_number='1700000000000123',
        amount=Decimal('150.00'),
        due_date=date(2030, 1, 10),
        status=BoletoStatus.PENDING,
    )


@pytest.fixture
def foreign_boleto(foreign_company):
    return CompanyBoleto.objects.create(
        company=foreign_company,
        boleto_number='1700000000000999',
        amount=Decimal('99.00'),
        due_date=date(2030, 1, 10),
    )
