import pytest
from datetime import date, timedelta
from decimal import Decimal
from django.core.cache import cache
from django.utils import timezone
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


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def analytics_user(db):
    """Create the main analytics test user."""
    return User.objects.create_user(
        email='analytics_user@example.com',
        password='TestPass123!',
        display_name='Analytics User',
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='analytics_other@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def analytics_user_client(analytics_user):
    """Return API client authenticated as analytics_user."""
    client = APIClient()
    refresh = RefreshToken.for_user(analytics_user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


# =============================================================================
# Properties
# =============================================================================

def make_property(user, **kwargs):
    defaults = {
        'owner_name': 'Proprietário',
        'farm_name': 'Sítio',
        'payment_status': PaymentStatus.PENDENTE,
    }
    defaults.update(kwargs)
    return RuralProperty.objects.create(user=user, **defaults)


@pytest.fixture
def mixed_properties(analytics_user):
    """
    One property per situation:
        upcoming  - PENDENTE, due in 3 days, R$ 1500,00
        paid      - PAGO, R$ 2500,50
        late      - PENDENTE in storage but 10 days past due, R$ 800,00
        atrasado  - ATRASADO, no due date, R$ 1000,00
        no_amount - PENDENTE without amount or due date
    """
    today = timezone.localdate()
    return {
        'upcoming': make_property(
            analytics_user, owner_name='João', amount=Decimal('1500.00'),
            due_date=today + timedelta(days=3),
        ),
        'paid': make_property(
            analytics_user, owner_name='Maria', amount=Decimal('2500.50'),
            due_date=today - timedelta(days=20), payment_status=PaymentStatus.PAGO,
            payment_date=today - timedelta(days=25),
        ),
        'late': make_property(
            analytics_user, owner_name='Pedro', amount=Decimal('800.00'),
            due_date=today - timedelta(days=10),
        ),
        'atrasado': make_property(
            analytics_user, owner_name='Ana', amount=Decimal('1000.00'),
            payment_status=PaymentStatus.ATRASADO,
        ),
        'no_amount': make_property(analytics_user, owner_name='Luiz'),
    }


@pytest.fixture
def foreign_properties(other_user):
    """Properties of another user; never counted for analytics_user."""
    today = timezone.localdate()
    return [
        make_property(other_user, amount=Decimal('999.00'), due_date=today + timedelta(days=1)),
        make_property(other_user, amount=Decimal('999.00'), due_date=today - timedelta(days=1)),
    ]


# =============================================================================
# Companies
# =============================================================================

@pytest.fixture
def mei_company(analytics_user):
    return Company.objects.create(
        user=analytics_user,
        name='Barbearia Central',
        cnpj='11222333000181',
        regime_type=RegimeType.MEI,
        boleto_amount=Decimal('100.00'),
    )


@pytest.fixture
def simples_company(analytics_user):
    return Company.objects.create(
        user=analytics_user,
        name='Comércio Alfa',
        cnpj='11444777000161',
        regime_type=RegimeType.SIMPLES_NACIONAL,
        boleto_amount=Decimal('300.00'),
    )


@pytest.fixture
def company_fees(mei_company, simples_company):
    """
    2024 fees seen from 2024-06-15:
        MEI      - Jan pago 100, Jun pendente 100 (due 06-20)
        Simples  - Mar pendente 300 (due 03-10, overdue), 2023 Dec pago 300
    """
    return [
        MonthlyFee.objects.create(
            company=mei_company, year=2024, month=1, amount=Decimal('100.00'),
            due_date=date(2024, 1, 5), status=FeeStatus.PAGO,
        ),
        MonthlyFee.objects.create(
            company=mei_company, year=2024, month=6, amount=Decimal('100.00'),
            due_date=date(2024, 6, 20),
        ),
        MonthlyFee.objects.create(
            company=simples_company, year=2024, month=3, amount=Decimal('300.00'),
            due_date=date(2024, 3, 10),
        ),
        MonthlyFee.objects.create(
            company=simples_company, year=2023, month=12, amount=Decimal('300.00'),
            due_date=date(2023, 12, 10), status=FeeStatus.PAGO,
        ),
    ]
