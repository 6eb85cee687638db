import pytest
from datetime import date
from decimal import Decimal
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.properties.models import RuralProperty, PaymentStatus
from apps.companies.models import Company, MonthlyFee, FeeStatus, RegimeType


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
        email='relatorios@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='outro-relatorios@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def owner_client(owner):
    client = APIClient()
    refresh = RefreshToken.for_user(owner)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def properties(owner):
    return [
        RuralProperty.objects.create(
            user=owner,
            owner_name='João da Silva',
            farm_name='Sítio Boa Vista, Lote 2',
            address='Estrada "Velha", km 12',
            cpf='52998224725',
            phone='11987654321',
            ccir='950.041.000.086-0',
            itr='1.234.567-8',
            amount=Decimal('1234.56'),
            due_date=date(2024, 3, 15),
            payment_status=PaymentStatus.PAGO,
            payment_date=date(2024, 3, 10),
        ),
        RuralProperty.objects.create(
            user=owner,
            owner_name='Maria Oliveira',
            farm_name='Fazenda Santa Rita',
            amount=Decimal('500.00'),
            payment_status=PaymentStatus.PENDENTE,
        ),
    ]


@pytest.fixture
def foreign_property(other_user):
    return RuralProperty.objects.create(
        user=other_user,
        owner_name='Ana Costa',
        amount=Decimal('999.00'),
    )


@pytest.fixture
def company(owner):
    company = Company.objects.create(
        user=owner,
        name='Padaria Pão Quente',
        cnpj='11222333000181',
        regime_type=RegimeType.MEI,
        email='padaria@example.com',
        phone='1133334444',
        boleto_day=10,
        boleto_amount=Decimal('150.00'),
    )
    MonthlyFee.objects.create(
        company=company, year=2024, month=1, amount=Decimal('150.00'),
        due_date=date(2024, 1, 10), status=FeeStatus.PAGO,
    )
    MonthlyFee.objects.create(
        company=company, year=2024, month=2, amount=Decimal('150.00'),
        due_date=date(2024, 2, 10),
    )
    return company
