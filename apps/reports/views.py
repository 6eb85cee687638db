from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from apps.companies.models import Company
from apps.properties.models import RuralProperty
from apps.properties.services import filter_properties
from .exporters import export_properties, export_companies
from .exceptions import UnsupportedFormatError
from .serializers import (
    PropertyExportQuerySerializer,
    CompanyExportQuerySerializer,
    ErrorSerializer,
)


def _file_response(export):
    response = HttpResponse(export.content, content_type=export.content_type)
    response['Content-Disposition'] = f'attachment; filename="{export.filename}"'
    return response


@extend_schema(
    parameters=[
        OpenApiParameter('format', OpenApiTypes.STR, enum=['csv', 'pdf', 'xlsx']),
        OpenApiParameter('title', OpenApiTypes.STR, description='PDF title'),
        OpenApiParameter('search', OpenApiTypes.STR),
        OpenApiParameter('status', OpenApiTypes.STR, enum=['PENDENTE', 'PAGO', 'ATRASADO']),
        OpenApiParameter('date_from', OpenApiTypes.DATE),
        OpenApiParameter('date_to', OpenApiTypes.DATE),
        OpenApiParameter('amount_min', OpenApiTypes.DECIMAL),
        OpenApiParameter('amount_max', OpenApiTypes.DECIMAL),
    ],
    responses={
        (200, 'application/octet-stream'): OpenApiTypes.BINARY,
        400: ErrorSerializer,
    },
    description="Download the (filtered) property list as CSV, PDF or XLSX.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_properties_view(request):
    query_serializer = PropertyExportQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = dict(query_serializer.validated_data)
    export_format = params.pop('format')
    title = params.pop('title', None)

    queryset = filter_properties(RuralProperty.objects.filter(user=request.user), **params)

    try:
        export = export_properties(
            user=request.user,
            queryset=queryset,
            export_format=export_format,
            title=title,
        )
    except UnsupportedFormatError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return _file_response(export)


@extend_schema(
    parameters=[
        OpenApiParameter('format', OpenApiTypes.STR, enum=['csv']),
        OpenApiParameter('year', OpenApiTypes.INT, description='Fee year (defaults to the current year)'),
    ],
    responses={
        (200, 'text/csv'): OpenApiTypes.BINARY,
        400: ErrorSerializer,
    },
    description="Download the live companies with their yearly fee totals as CSV.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_companies_view(request):
    query_serializer = CompanyExportQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        export = export_companies(
            user=request.user,
            companies=Company.objects.alive().filter(user=request.user),
            export_format=params['format'],
            year=params.get('year'),
        )
    except UnsupportedFormatError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return _file_response(export)
