import pytest
from django.utils import timezone
from django.urls import reverse
from rest_framework import status
from apps.companies.models import Company


# =============================================================================
# Statistics
# =============================================================================

@pytest.mark.django_db
class TestStatisticsEndpoint:

    def test_statistics(self, analytics_user_client, mixed_properties, foreign_properties):
        response = analytics_user_client.get(reverse('analytics:statistics'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total'] == 5
        assert response.data['paid'] == 1
        assert response.data['total_amount'] == '5800.50'
        assert response.data['received_amount'] == '2500.50'
        assert response.data['payment_rate'] == 20.0

    def test_statistics_unauthenticated(self, api_client):
        response = api_client.get(reverse('analytics:statistics'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Charts & alerts
# =============================================================================

@pytest.mark.django_db
class TestChartsEndpoint:

    def test_charts(self, analytics_user_client, mixed_properties):
        response = analytics_user_client.get(reverse('analytics:charts'))

        assert response.status_code == status.HTTP_200_OK
        names = [s['name'] for s in response.data['status_distribution']]
        assert names == ['Pagos', 'Pendentes', 'Atrasados']
        assert sum(row['count'] for row in response.data['monthly_due']) == 3


@pytest.mark.django_db
class TestAlertsEndpoint:

    def test_alerts(self, analytics_user_client, mixed_properties):
        response = analytics_user_client.get(reverse('analytics:alerts'))

        assert response.status_code == status.HTTP_200_OK
        assert {a['type'] for a in response.data} == {'upcoming', 'overdue'}

    def test_no_alerts(self, analytics_user_client):
        response = analytics_user_client.get(reverse('analytics:alerts'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == []


# =============================================================================
# Companies overview
# =============================================================================

@pytest.mark.django_db
class TestCompaniesOverviewEndpoint:

    def test_overview_for_year(self, analytics_user_client, company_fees):
        response = analytics_user_client.get(reverse('analytics:companies-overview'), {'year': 2023})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['year'] == 2023
        assert response.data['totals']['paid'] == '300.00'
        assert len(response.data['companies']) == 2

    def test_overview_default_year(self, analytics_user_client, mei_company):
        response = analytics_user_client.get(reverse('analytics:companies-overview'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['year'] == timezone.localdate().year

    def test_overview_invalid_year(self, analytics_user_client):
        response = analytics_user_client.get(reverse('analytics:companies-overview'), {'year': 1800})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_overview_only_own_companies(self, analytics_user_client, other_user, mei_company):
        Company.objects.create(user=other_user, name='Empresa Alheia', cnpj='11222333000181')

        response = analytics_user_client.get(reverse('analytics:companies-overview'))

        assert [c['name'] for c in response.data['companies']] == ['Barbearia Central']


# =============================================================================
# Dashboard
# =============================================================================

@pytest.mark.django_db
class TestDashboardEndpoint:

    def test_dashboard(self, analytics_user_client, mixed_properties, mei_company):
        response = analytics_user_client.get(reverse('analytics:dashboard'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['statistics']['total'] == 5
        assert len(response.data['charts']['status_distribution']) == 3
        assert len(response.data['alerts']) == 2
        assert response.data['companies'] == 1

    def test_dashboard_unauthenticated(self, api_client):
        response = api_client.get(reverse('analytics:dashboard'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
