from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from apps.companies.models import Company
from .analytics import AnalyticsQueries
from .serializers import (
    # Input serializers
    OverviewQuerySerializer,
    # Response serializers
    PropertyStatisticsSerializer,
    ChartDataSerializer,
    AlertSerializer,
    CompaniesOverviewSerializer,
    DashboardResponseSerializer,
    ErrorSerializer,
)
from .exceptions import AnalyticsServiceError


@extend_schema(
    responses={200: PropertyStatisticsSerializer},
    description="Payment statistics over the user's rural properties.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def property_statistics(request):
    data = AnalyticsQueries.property_statistics(request.user)
    return Response(PropertyStatisticsSerializer(data).data)


@extend_schema(
    responses={200: ChartDataSerializer},
    description="Status distribution and number of properties due per month.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def chart_data(request):
    return Response(AnalyticsQueries.chart_data(request.user))


@extend_schema(
    responses={200: AlertSerializer(many=True)},
    description="Upcoming and overdue payments plus payment-rate alerts.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def payment_alerts(request):
    return Response(AnalyticsQueries.payment_alerts(request.user))


@extend_schema(
    parameters=[
        OpenApiParameter('year', OpenApiTypes.INT, description='Fee year (defaults to the current year)'),
    ],
    responses={
        200: CompaniesOverviewSerializer,
        400: ErrorSerializer,
    },
    description="Paid, pending and overdue monthly fee totals per company for a year.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def companies_overview(request):
    """Yearly fee totals - thin HTTP handler."""
    query_serializer = OverviewQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    try:
        data = AnalyticsQueries.companies_overview(
            request.user,
            year=query_serializer.validated_data.get('year'),
        )
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(CompaniesOverviewSerializer(data).data)


@extend_schema(
    responses={200: DashboardResponseSerializer},
    description="Dashboard summary: statistics, chart series and alerts.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """
    GET /api/analytics/dashboard/

    Combines statistics, charts and alerts so the home screen needs a
    single request.
    """
    user = request.user
    data = {
        'statistics': AnalyticsQueries.property_statistics(user),
        'charts': AnalyticsQueries.chart_data(user),
        'alerts': AnalyticsQueries.payment_alerts(user),
        'companies': Company.objects.alive().filter(user=user).count(),
    }
    return Response(DashboardResponseSerializer(data).data)
