import pytest
from datetime import timedelta
from decimal import Decimal
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.properties.models import RuralProperty, PaymentStatus


VALID_CPF = '52998224725'
OTHER_VALID_CPF = '11144477735'


@pytest.fixture(autouse=True)
def clear_throttle_cache():
    """Throttle history lives in the cache; start every test clean."""
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
        email='operador@example.com',
        password='TestPass123!',
        display_name='Operador',
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='outro@example.com',
        password='TestPass123!',
        display_name='Outro Operador',
    )


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def owner_client(owner):
    """Return API client authenticated as the property owner."""
    return _client_for(owner)


@pytest.fixture
def other_client(other_user):
    """Return API client authenticated as an unrelated user."""
    return _client_for(other_user)


@pytest.fixture
def property_pending(owner):
    """Unpaid property due in three days."""
    return RuralProperty.objects.create(
        user=owner,
        owner_name='João da Silva',
        farm_name='Sítio Boa Vista',
        address='Estrada Municipal, km 12',
        cpf=VALID_CPF,
        phone='11987654321',
        ccir='950.041.000.086-0',
        itr='1.234.567-8',
        amount=Decimal('1500.00'),
        due_date=timezone.localdate() + timedelta(days=3),
        payment_status=PaymentStatus.PENDENTE,
    )


@pytest.fixture
def property_paid(owner):
    return RuralProperty.objects.create(
        user=owner,
        owner_name='Maria Oliveira',
        farm_name='Fazenda Santa Rita',
        address='Rodovia GO-060, km 30',
        cpf=OTHER_VALID_CPF,
        amount=Decimal('2500.50'),
        due_date=timezone.localdate() - timedelta(days=20),
        payment_status=PaymentStatus.PAGO,
        payment_date=timezone.localdate() - timedelta(days=25),
    )


@pytest.fixture
def property_overdue(owner):
    """PENDENTE in storage but already past its due date."""
    return RuralProperty.objects.create(
        user=owner,
        owner_name='Pedro Santos',
        farm_name='Chácara Recanto',
        amount=Decimal('800.00'),
        due_date=timezone.localdate() - timedelta(days=10),
        payment_status=PaymentStatus.PENDENTE,
    )


@pytest.fixture
def foreign_property(other_user):
    """Property that belongs to another operator."""
    return RuralProperty.objects.create(
        user=other_user,
        owner_name='Ana Costa',
        farm_name='Sítio Alheio',
        amount=Decimal('999.00'),
    )
