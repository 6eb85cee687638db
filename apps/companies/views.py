from django.utils import timezone
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from .permissions import IsCompanyOwner
from .serializers import (
    CompanyWriteSerializer,
    CompanySerializer,
    YearQuerySerializer,
    MonthlyFeeInputSerializer,
    MonthlyFeeSerializer,
    FeeOverviewSerializer,
    BoletoCreateSerializer,
    BoletoUpdateSerializer,
    MarkBoletoPaidSerializer,
    MarkBoletoSentSerializer,
    CancelBoletoSerializer,
    CompanyBoletoSerializer,
    BoletoScheduleSerializer,
)
from .services import (
    companies_for_user,
    create_company,
    update_company,
    delete_company,
    set_monthly_fee,
    mark_fee_paid,
    year_overview,
    boletos_for_user,
    create_local_boleto,
    update_boleto,
    mark_boleto_paid,
    mark_boleto_sent,
    cancel_boleto,
    get_schedule,
    upsert_schedule,
    delete_schedule,
    CompanyNotFoundError,
    InvalidCompanyDataError,
    FeeNotFoundError,
    BoletoNotFoundError,
    InvalidBoletoStateError,
    ScheduleNotFoundError,
)


UUID_LOOKUP_REGEX = '[0-9a-fA-F-]{36}'


def _invalid_data_response(error):
    return Response(
        {'error': str(error), 'details': error.errors},
        status=status.HTTP_400_BAD_REQUEST
    )


def _not_found_response(error):
    return Response({'error': str(error)}, status=status.HTTP_404_NOT_FOUND)


class CompanyViewSet(viewsets.ModelViewSet):
    """
    ViewSet for client companies.

    list: Own companies, newest first, with the last boleto date
    create: Register a company
    retrieve / update / partial_update: Read or change a company
    destroy: Soft delete
    fees / boletos / schedule: Per-company billing data
    """

    serializer_class = CompanySerializer
    permission_classes = [IsAuthenticated, IsCompanyOwner]
    lookup_value_regex = UUID_LOOKUP_REGEX

    def get_queryset(self):
        return companies_for_user(self.request.user)

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return CompanyWriteSerializer
        return CompanySerializer

    @extend_schema(responses={201: CompanySerializer})
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            company = create_company(user=request.user, data=serializer.validated_data)
        except InvalidCompanyDataError as e:
            return _invalid_data_response(e)

        return Response(CompanySerializer(company).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: CompanySerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            company = update_company(
                company_id=instance.id,
                user=request.user,
                data=serializer.validated_data,
            )
        except CompanyNotFoundError as e:
            return _not_found_response(e)
        except InvalidCompanyDataError as e:
            return _invalid_data_response(e)

        company.last_boleto_date = instance.last_boleto_date
        return Response(CompanySerializer(company).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            delete_company(company_id=instance.id, user=request.user)
        except CompanyNotFoundError as e:
            return _not_found_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # -------------------------------------------------------------------------
    # Monthly fees
    # -------------------------------------------------------------------------

    @extend_schema(
        methods=['GET'],
        parameters=[OpenApiParameter('year', OpenApiTypes.INT, description='Defaults to the current year')],
        responses={200: FeeOverviewSerializer},
        description="Twelve-month fee overview; pendente fees past due show as atrasado.",
    )
    @extend_schema(
        methods=['POST'],
        request=MonthlyFeeInputSerializer,
        responses={200: MonthlyFeeSerializer},
        description="Add or replace a month's fee.",
    )
    @action(detail=True, methods=['get', 'post'])
    def fees(self, request, pk=None):
        """
        GET  /api/companies/{id}/fees/?year=2024
        POST /api/companies/{id}/fees/  {"year": 2024, "month": 3, "amount": "150.00"}
        """
        company = self.get_object()

        if request.method == 'GET':
            query_serializer = YearQuerySerializer(data=request.query_params)
            query_serializer.is_valid(raise_exception=True)
            year = query_serializer.validated_data.get('year') or timezone.localdate().year
            overview = year_overview(company=company, year=year)
            return Response(FeeOverviewSerializer(overview).data)

        input_serializer = MonthlyFeeInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        try:
            fee = set_monthly_fee(company=company, **input_serializer.validated_data)
        except InvalidCompanyDataError as e:
            return _invalid_data_response(e)
        return Response(MonthlyFeeSerializer(fee).data)

    @extend_schema(
        request=None,
        responses={200: MonthlyFeeSerializer},
        description="Mark the fee of a month as paid.",
    )
    @action(
        detail=True,
        methods=['post'],
        url_path=r'fees/(?P<year>\d{4})/(?P<month>\d{1,2})/mark-paid',
        url_name='fee-mark-paid',
    )
    def fee_mark_paid(self, request, pk=None, year=None, month=None):
        company = self.get_object()
        try:
            fee = mark_fee_paid(company=company, year=int(year), month=int(month))
        except FeeNotFoundError as e:
            return _not_found_response(e)
        return Response(MonthlyFeeSerializer(fee).data)

    # -------------------------------------------------------------------------
    # Boletos
    # -------------------------------------------------------------------------

    @extend_schema(methods=['GET'], responses={200: CompanyBoletoSerializer(many=True)})
    @extend_schema(
        methods=['POST'],
        request=BoletoCreateSerializer,
        responses={201: CompanyBoletoSerializer},
        description="Record a local boleto (number generated, status pending).",
    )
    @action(detail=True, methods=['get', 'post'])
    def boletos(self, request, pk=None):
        company = self.get_object()

        if request.method == 'GET':
            boletos = company.boletos.select_related('company')
            return Response(CompanyBoletoSerializer(boletos, many=True).data)

        input_serializer = BoletoCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        params = dict(input_serializer.validated_data)

        fee_year = params.pop('fee_year', None)
        fee_month = params.pop('fee_month', None)
        monthly_fee = None
        if fee_year is not None:
            monthly_fee = company.monthly_fees.filter(year=fee_year, month=fee_month).first()
            if monthly_fee is None:
                return Response(
                    {'error': f"Nenhuma mensalidade em {fee_month:02d}/{fee_year}"},
                    status=status.HTTP_404_NOT_FOUND
                )

        try:
            boleto = create_local_boleto(company=company, monthly_fee=monthly_fee, **params)
        except InvalidCompanyDataError as e:
            return _invalid_data_response(e)
        return Response(CompanyBoletoSerializer(boleto).data, status=status.HTTP_201_CREATED)

    # -------------------------------------------------------------------------
    # Schedule
    # -------------------------------------------------------------------------

    @extend_schema(methods=['GET'], responses={200: BoletoScheduleSerializer})
    @extend_schema(methods=['PUT'], request=BoletoScheduleSerializer, responses={200: BoletoScheduleSerializer})
    @extend_schema(methods=['DELETE'], responses={204: None})
    @action(detail=True, methods=['get', 'put', 'delete'])
    def schedule(self, request, pk=None):
        company = self.get_object()

        if request.method == 'GET':
            try:
                schedule = get_schedule(company=company)
            except ScheduleNotFoundError as e:
                return _not_found_response(e)
            return Response(BoletoScheduleSerializer(schedule).data)

        if request.method == 'DELETE':
            try:
                delete_schedule(company=company)
            except ScheduleNotFoundError as e:
                return _not_found_response(e)
            return Response(status=status.HTTP_204_NO_CONTENT)

        input_serializer = BoletoScheduleSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        try:
            schedule = upsert_schedule(company=company, data=input_serializer.validated_data)
        except InvalidCompanyDataError as e:
            return _invalid_data_response(e)
        return Response(BoletoScheduleSerializer(schedule).data)


class CompanyBoletoViewSet(
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet
):
    """
    Boletos of the operator's companies.

    retrieve: Get a boleto
    partial_update: Change amount, due date or notes
    mark-paid / mark-sent / cancel: Status transitions
    """

    serializer_class = CompanyBoletoSerializer
    permission_classes = [IsAuthenticated, IsCompanyOwner]
    lookup_value_regex = UUID_LOOKUP_REGEX
    http_method_names = ['get', 'post', 'patch', 'head', 'options']

    def get_queryset(self):
        return boletos_for_user(self.request.user)

    def _transition(self, service, **params):
        instance = self.get_object()
        try:
            boleto = service(boleto_id=instance.id, user=self.request.user, **params)
        except BoletoNotFoundError as e:
            return _not_found_response(e)
        except InvalidBoletoStateError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except InvalidCompanyDataError as e:
            return _invalid_data_response(e)
        return Response(CompanyBoletoSerializer(boleto).data)

    @extend_schema(request=BoletoUpdateSerializer, responses={200: CompanyBoletoSerializer})
    def partial_update(self, request, *args, **kwargs):
        input_serializer = BoletoUpdateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        return self._transition(update_boleto, data=input_serializer.validated_data)

    @extend_schema(request=MarkBoletoPaidSerializer, responses={200: CompanyBoletoSerializer})
    @action(detail=True, methods=['post'], url_path='mark-paid')
    def mark_paid(self, request, pk=None):
        input_serializer = MarkBoletoPaidSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        return self._transition(
            mark_boleto_paid,
            payment_date=input_serializer.validated_data.get('payment_date'),
        )

    @extend_schema(request=MarkBoletoSentSerializer, responses={200: CompanyBoletoSerializer})
    @action(detail=True, methods=['post'], url_path='mark-sent')
    def mark_sent(self, request, pk=None):
        input_serializer = MarkBoletoSentSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        return self._transition(mark_boleto_sent, email=input_serializer.validated_data['email'])

    @extend_schema(request=CancelBoletoSerializer, responses={200: CompanyBoletoSerializer})
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        input_serializer = CancelBoletoSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        return self._transition(cancel_boleto, notes=input_serializer.validated_data.get('notes', ''))
