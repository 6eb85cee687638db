"""
Analytics Module
=================

Read-only aggregate queries behind the dashboard: property payment
statistics, chart series, payment alerts and the yearly overview of
company monthly fees.

Classes:
    AnalyticsQueries: Static methods for the analytics queries.

Key Features:
    - Counts and amounts per payment status
    - Status distribution and due-date-per-month series for charts
    - Upcoming/overdue payment alerts and payment-rate goals
    - Per-company fee totals for a year

Example:
    Getting a user's dashboard numbers::

        from apps.analytics.analytics import AnalyticsQueries

        stats = AnalyticsQueries.property_statistics(user)
        print(f"{stats['paid']} of {stats['total']} paid ({stats['payment_rate']}%)")

        for alert in AnalyticsQueries.payment_alerts(user):
            print(alert['title'], alert['message'])

Note:
    Every method is scoped to a single user and returns plain dictionaries
    and lists, ready for JSON serialization.
"""

from collections import Counter
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db.models import Sum, Count, Q, Value, DecimalField, Prefetch
from django.db.models.functions import TruncMonth, Coalesce
from django.utils import timezone

from apps.properties.models import RuralProperty, PaymentStatus
from apps.companies.models import Company, MonthlyFee, RegimeType
from apps.companies.services import fee_totals
from .exceptions import InvalidYearError


def _money_sum(field='amount', **filter_kwargs):
    """SUM that yields 0.00 instead of NULL."""
    condition = Q(**filter_kwargs) if filter_kwargs else None
    return Coalesce(
        Sum(field, filter=condition),
        Value(Decimal('0.00')),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )


class AnalyticsQueries:
    """
    Aggregate queries for analytics endpoints.

    Methods:
        property_statistics: Counts, amounts and payment rate of properties.
        chart_data: Status distribution and properties due per month.
        payment_alerts: Upcoming/overdue payments and payment-rate goals.
        companies_overview: Per-company fee totals for a year.

    Example:
        Dashboard data aggregation::

            stats = AnalyticsQueries.property_statistics(user)
            charts = AnalyticsQueries.chart_data(user)
            alerts = AnalyticsQueries.payment_alerts(user)
    """

    @staticmethod
    def property_statistics(user, queryset=None):
        """
        Calculate payment statistics over a user's rural properties.

        Counts follow the stored ``payment_status``. ``pending_amount`` sums
        everything not yet paid (PENDENTE and ATRASADO); ``received_amount``
        sums PAGO records. Properties without an amount count as zero.

        Args:
            user (User): Owner of the properties.
            queryset (QuerySet, optional): Pre-filtered properties of the
                user (e.g. the list filters of an export). Defaults to all
                of the user's properties.

        Returns:
            dict: Statistics with keys:
                - total (int): Number of properties
                - paid (int): PAGO count
                - pending (int): PENDENTE count
                - overdue (int): ATRASADO count
                - total_amount (Decimal): Sum of all amounts
                - pending_amount (Decimal): Sum not yet received
                - received_amount (Decimal): Sum received
                - payment_rate (float): paid / total * 100, 0 when empty

        Example:
            >>> AnalyticsQueries.property_statistics(user)
            {
                'total': 4,
                'paid': 1,
                'pending': 2,
                'overdue': 1,
                'total_amount': Decimal('5600.50'),
                'pending_amount': Decimal('3100.00'),
                'received_amount': Decimal('2500.50'),
                'payment_rate': 25.0
            }
        """
        if queryset is None:
            queryset = RuralProperty.objects.filter(user=user)

        totals = queryset.aggregate(
            total=Count('id'),
            paid=Count('id', filter=Q(payment_status=PaymentStatus.PAGO)),
            pending=Count('id', filter=Q(payment_status=PaymentStatus.PENDENTE)),
            overdue=Count('id', filter=Q(payment_status=PaymentStatus.ATRASADO)),
            total_amount=_money_sum(),
            pending_amount=_money_sum(payment_status__in=[PaymentStatus.PENDENTE, PaymentStatus.ATRASADO]),
            received_amount=_money_sum(payment_status=PaymentStatus.PAGO),
        )

        total = totals['total']
        totals['payment_rate'] = round(totals['paid'] / total * 100, 2) if total else 0.0
        return totals

    @staticmethod
    def chart_data(user):
        """
        Series for the dashboard charts.

        Returns:
            dict: Chart data with keys:
                - status_distribution (list): ``{'name', 'status', 'value'}``
                  for Pagos, Pendentes and Atrasados
                - monthly_due (list): ``{'month': 'YYYY-MM', 'count'}``,
                  ascending; properties without a due date are skipped

        Example:
            >>> AnalyticsQueries.chart_data(user)['monthly_due']
            [{'month': '2024-01', 'count': 3}, {'month': '2024-02', 'count': 1}]
        """
        properties = RuralProperty.objects.filter(user=user)
        counts = {
            row['payment_status']: row['count']
            for row in properties.values('payment_status').annotate(count=Count('id'))
        }

        status_distribution = [
            {'name': 'Pagos', 'status': PaymentStatus.PAGO, 'value': counts.get(PaymentStatus.PAGO, 0)},
            {'name': 'Pendentes', 'status': PaymentStatus.PENDENTE, 'value': counts.get(PaymentStatus.PENDENTE, 0)},
            {'name': 'Atrasados', 'status': PaymentStatus.ATRASADO, 'value': counts.get(PaymentStatus.ATRASADO, 0)},
        ]

        monthly = (
            properties
            .exclude(due_date__isnull=True)
            .annotate(month=TruncMonth('due_date'))
            .values('month')
            .annotate(count=Count('id'))
            .order_by('month')
        )
        monthly_due = [
            {'month': row['month'].strftime('%Y-%m'), 'count': row['count']}
            for row in monthly
        ]

        return {
            'status_distribution': status_distribution,
            'monthly_due': monthly_due,
        }

    @staticmethod
    def payment_alerts(user, today=None):
        """
        Build the payment alerts shown on the dashboard.

        Alerts are derived from due dates rather than the stored status:

        - ``upcoming`` (warning): not paid, due between today and
          ``ALERT_UPCOMING_DAYS`` from now
        - ``overdue`` (error): not paid, due before today
        - ``low_rate`` (warning): payment rate below ``ALERT_LOW_PAYMENT_RATE``
        - ``high_rate`` (success): payment rate at or above
          ``ALERT_HIGH_PAYMENT_RATE``

        Payment-rate alerts only appear once the user has more than
        ``ALERT_MIN_PROPERTIES`` properties.

        Args:
            user (User): Owner of the properties.
            today (date, optional): Reference day. Defaults to today in
                the project time zone.

        Returns:
            list: Alerts, each ``{'type', 'level', 'title', 'message', 'count'}``.
        """
        today = today or timezone.localdate()
        horizon = today + timedelta(days=settings.ALERT_UPCOMING_DAYS)

        unpaid = (
            RuralProperty.objects
            .filter(user=user, due_date__isnull=False)
            .exclude(payment_status=PaymentStatus.PAGO)
        )
        upcoming = unpaid.filter(due_date__gte=today, due_date__lte=horizon).count()
        overdue = unpaid.filter(due_date__lt=today).count()

        alerts = []
        if upcoming:
            alerts.append({
                'type': 'upcoming',
                'level': 'warning',
                'title': 'Pagamentos Próximos',
                'message': (
                    f'Você tem {upcoming} pagamento(s) vencendo nos próximos '
                    f'{settings.ALERT_UPCOMING_DAYS} dias'
                ),
                'count': upcoming,
            })
        if overdue:
            alerts.append({
                'type': 'overdue',
                'level': 'error',
                'title': 'Pagamentos Atrasados',
                'message': f'Você tem {overdue} pagamento(s) em atraso',
                'count': overdue,
            })

        stats = AnalyticsQueries.property_statistics(user)
        rate = stats['payment_rate']
        if stats['total'] > settings.ALERT_MIN_PROPERTIES:
            if rate < settings.ALERT_LOW_PAYMENT_RATE:
                alerts.append({
                    'type': 'low_rate',
                    'level': 'warning',
                    'title': 'Taxa de Pagamento Baixa',
                    'message': (
                        f'Sua taxa de pagamento está em {rate:.1f}%. '
                        'Considere revisar os pagamentos pendentes.'
                    ),
                    'count': stats['total'],
                })
            elif rate >= settings.ALERT_HIGH_PAYMENT_RATE:
                alerts.append({
                    'type': 'high_rate',
                    'level': 'success',
                    'title': 'Excelente Controle!',
                    'message': f'Parabéns! Sua taxa de pagamento está em {rate:.1f}%',
                    'count': stats['total'],
                })

        return alerts

    @staticmethod
    def companies_overview(user, year=None, today=None):
        """
        Fee totals of every live company of a user for one year.

        A ``pendente`` fee past its due date counts as overdue (it is also
        part of the pending total).

        Args:
            user (User): Owner of the companies.
            year (int, optional): Fee year. Defaults to the current year.
            today (date, optional): Reference day for overdue fees.

        Returns:
            dict: Overview with keys:
                - year (int)
                - companies (list): ``{'id', 'name', 'regime_type', 'paid',
                  'pending', 'overdue', 'paid_count', 'pending_count',
                  'overdue_count'}`` per company
                - totals (dict): ``paid``, ``pending`` and ``overdue`` sums
                - active_by_regime (dict): active companies per regime

        Raises:
            InvalidYearError: If the year is outside 2000-2100.
        """
        today = today or timezone.localdate()
        year = year or today.year
        if not 2000 <= year <= 2100:
            raise InvalidYearError(f"Ano inválido: {year}")

        companies = (
            Company.objects
            .alive()
            .filter(user=user)
            .prefetch_related(
                Prefetch('monthly_fees', queryset=MonthlyFee.objects.filter(year=year), to_attr='year_fees')
            )
            .order_by('name')
        )

        rows = []
        totals = {'paid': Decimal('0.00'), 'pending': Decimal('0.00'), 'overdue': Decimal('0.00')}
        regimes = Counter()
        for company in companies:
            company_totals = fee_totals(company.year_fees, today)
            rows.append({
                'id': company.id,
                'name': company.name,
                'regime_type': company.regime_type,
                **company_totals,
            })
            for key in totals:
                totals[key] += company_totals[key]
            if company.is_active:
                regimes[company.regime_type] += 1

        return {
            'year': year,
            'companies': rows,
            'totals': totals,
            'active_by_regime': {regime: regimes.get(regime, 0) for regime in RegimeType.values},
        }
