"""
Serializers for analytics app.

This module contains:
1. Input serializers - Query parameter validation
2. Response serializers - API documentation and output formatting

Input Serializers:
    OverviewQuerySerializer - Validates the fee year of the companies overview

Response Serializers:
    PropertyStatisticsSerializer - Counts, amounts and payment rate
    ChartDataSerializer - Status distribution and monthly due series
    AlertSerializer - A single dashboard alert
    CompaniesOverviewSerializer - Yearly fee totals per company
    DashboardResponseSerializer - Dashboard summary
"""

from rest_framework import serializers


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class OverviewQuerySerializer(serializers.Serializer):
    """
    Validate the companies overview query parameters.

    Query Parameters:
        year (int): Fee year, defaults to the current year
    """

    year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class PropertyStatisticsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    paid = serializers.IntegerField()
    pending = serializers.IntegerField()
    overdue = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    pending_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    received_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_rate = serializers.FloatField(help_text='Paid / total * 100')


class StatusSliceSerializer(serializers.Serializer):
    name = serializers.CharField()
    status = serializers.CharField()
    value = serializers.IntegerField()


class MonthlyDueSerializer(serializers.Serializer):
    month = serializers.CharField(help_text='YYYY-MM')
    count = serializers.IntegerField()


class ChartDataSerializer(serializers.Serializer):
    status_distribution = StatusSliceSerializer(many=True)
    monthly_due = MonthlyDueSerializer(many=True)


class AlertSerializer(serializers.Serializer):
    """Dashboard alert; ``level`` is one of warning, error or success."""

    type = serializers.ChoiceField(choices=['upcoming', 'overdue', 'low_rate', 'high_rate'])
    level = serializers.ChoiceField(choices=['warning', 'error', 'success'])
    title = serializers.CharField()
    message = serializers.CharField()
    count = serializers.IntegerField()


class CompanyFeeTotalsSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    regime_type = serializers.CharField()
    paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    pending = serializers.DecimalField(max_digits=12, decimal_places=2)
    overdue = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_count = serializers.IntegerField()
    pending_count = serializers.IntegerField()
    overdue_count = serializers.IntegerField()


class OverviewTotalsSerializer(serializers.Serializer):
    paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    pending = serializers.DecimalField(max_digits=14, decimal_places=2)
    overdue = serializers.DecimalField(max_digits=14, decimal_places=2)


class CompaniesOverviewSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    companies = CompanyFeeTotalsSerializer(many=True)
    totals = OverviewTotalsSerializer()
    active_by_regime = serializers.DictField(child=serializers.IntegerField())


class DashboardResponseSerializer(serializers.Serializer):
    """Statistics, charts and alerts in a single payload."""

    statistics = PropertyStatisticsSerializer()
    charts = ChartDataSerializer()
    alerts = AlertSerializer(many=True)
    companies = serializers.IntegerField(help_text='Live companies of the user')


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
