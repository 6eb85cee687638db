import secrets

from django.conf import settings
from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from drf_spectacular.types import OpenApiTypes
from apps.companies.serializers import CompanyBoletoSerializer
from apps.companies.services import (
    get_company,
    get_boleto,
    CompanyNotFoundError,
    BoletoNotFoundError,
    InvalidBoletoStateError,
    InvalidCompanyDataError,
)
from .serializers import (
    IssueBoletoSerializer,
    CancelRemoteBoletoSerializer,
    WebhookEventSerializer,
    WebhookResultSerializer,
    BoletoValidationErrorSerializer,
)
from .services import (
    issue_company_boleto,
    fetch_boleto_pdf,
    cancel_company_boleto,
    refresh_boleto_status,
    apply_webhook_event,
    BoletoQRGenerator,
)
from .exceptions import BoletoValidationError, BoletoNotIssuedError, QRCodeUnavailableError


WEBHOOK_SECRET_HEADER = 'X-Cora-Webhook-Secret'


def _error(error, status_code):
    return Response({'error': str(error)}, status=status_code)


@extend_schema(
    request=IssueBoletoSerializer,
    responses={201: CompanyBoletoSerializer, 400: BoletoValidationErrorSerializer},
    description="Issue a boleto for the company through Cora and record it.",
    tags=['billing'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def issue_boleto(request, company_id):
    """
    POST /api/billing/companies/{company_id}/issue/
    Body: {"due_date": "YYYY-MM-DD", "amount": "150.00", "description": "..."}
    """
    serializer = IssueBoletoSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    params = dict(serializer.validated_data)

    try:
        company = get_company(company_id=company_id, user=request.user)
    except CompanyNotFoundError as e:
        return _error(e, status.HTTP_404_NOT_FOUND)

    fee_year = params.pop('fee_year', None)
    fee_month = params.pop('fee_month', None)
    monthly_fee = None
    if fee_year is not None:
        monthly_fee = company.monthly_fees.filter(year=fee_year, month=fee_month).first()
        if monthly_fee is None:
            return _error(f"Nenhuma mensalidade em {fee_month:02d}/{fee_year}", status.HTTP_404_NOT_FOUND)

    try:
        boleto = issue_company_boleto(company=company, monthly_fee=monthly_fee, **params)
    except BoletoValidationError as e:
        return Response(
            {'error': 'Dados do boleto inválidos', 'details': e.errors},
            status=status.HTTP_400_BAD_REQUEST
        )
    except InvalidCompanyDataError as e:
        return Response(
            {'error': str(e), 'details': e.errors},
            status=status.HTTP_400_BAD_REQUEST
        )

    return Response(CompanyBoletoSerializer(boleto).data, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={(200, 'application/pdf'): OpenApiTypes.BINARY},
    description="Download the boleto PDF from Cora.",
    tags=['billing'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def boleto_pdf(request, boleto_id):
    try:
        boleto, content = fetch_boleto_pdf(boleto_id=boleto_id, user=request.user)
    except BoletoNotFoundError as e:
        return _error(e, status.HTTP_404_NOT_FOUND)
    except BoletoNotIssuedError as e:
        return _error(e, status.HTTP_400_BAD_REQUEST)

    response = HttpResponse(content, content_type='application/pdf')
    response['Content-Disposition'] = f'inline; filename="boleto-{boleto.boleto_number}.pdf"'
    return response


@extend_schema(
    request=CancelRemoteBoletoSerializer,
    responses={200: CompanyBoletoSerializer},
    description="Cancel the boleto at Cora (when issued there) and locally.",
    tags=['billing'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cancel_boleto(request, boleto_id):
    serializer = CancelRemoteBoletoSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        boleto = cancel_company_boleto(
            boleto_id=boleto_id,
            user=request.user,
            notes=serializer.validated_data.get('notes', ''),
        )
    except BoletoNotFoundError as e:
        return _error(e, status.HTTP_404_NOT_FOUND)
    except InvalidBoletoStateError as e:
        return _error(e, status.HTTP_400_BAD_REQUEST)

    return Response(CompanyBoletoSerializer(boleto).data)


@extend_schema(
    responses={200: CompanyBoletoSerializer},
    description="Pull the boleto status from Cora.",
    tags=['billing'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def refresh_boleto(request, boleto_id):
    try:
        boleto = refresh_boleto_status(boleto_id=boleto_id, user=request.user)
    except BoletoNotFoundError as e:
        return _error(e, status.HTTP_404_NOT_FOUND)
    except BoletoNotIssuedError as e:
        return _error(e, status.HTTP_400_BAD_REQUEST)

    return Response(CompanyBoletoSerializer(boleto).data)


@extend_schema(
    responses={(200, 'image/png'): OpenApiTypes.BINARY},
    description="QR code (PNG) with the boleto's Pix EMV or digitable line.",
    tags=['billing'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def boleto_qr(request, boleto_id):
    try:
        boleto = get_boleto(boleto_id=boleto_id, user=request.user)
        png = BoletoQRGenerator.render_png(boleto)
    except (BoletoNotFoundError, QRCodeUnavailableError) as e:
        return _error(e, status.HTTP_404_NOT_FOUND)

    return HttpResponse(png, content_type='image/png')


@extend_schema(
    request=WebhookEventSerializer,
    responses={200: WebhookResultSerializer},
    description=f"Cora webhook. When a secret is configured it must match the {WEBHOOK_SECRET_HEADER} header.",
    tags=['billing'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def cora_webhook(request):
    expected = settings.CORA_WEBHOOK_SECRET
    if expected:
        received = request.headers.get(WEBHOOK_SECRET_HEADER, '')
        if not secrets.compare_digest(received.encode(), expected.encode()):
            return _error('Assinatura do webhook inválida', status.HTTP_403_FORBIDDEN)

    serializer = WebhookEventSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    boleto = apply_webhook_event(serializer.validated_data)
    return Response({
        'processed': boleto is not None,
        'boleto_id': boleto.id if boleto else None,
        'status': boleto.status if boleto else None,
    })
