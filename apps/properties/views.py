from django.conf import settings
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from .models import RuralProperty
from .permissions import IsPropertyOwner
from .serializers import (
    PropertyFilterSerializer,
    RuralPropertyWriteSerializer,
    RuralPropertySerializer,
    DuplicateCheckSerializer,
    DuplicateCheckResponseSerializer,
    MarkPaidInputSerializer,
    AutocompleteQuerySerializer,
    PropertyAutocompleteSerializer,
    SyncRequestSerializer,
    SyncResponseSerializer,
)
from .services import (
    create_property,
    update_property,
    delete_property,
    mark_property_paid,
    refresh_overdue_statuses,
    find_duplicate,
    filter_properties,
    autocomplete_by_letter,
    apply_sync_operations,
    PropertyNotFoundError,
    InvalidPropertyDataError,
    DuplicatePropertyError,
)


# Throttle scope per write action; rates live in REST_FRAMEWORK settings
THROTTLE_SCOPES = {
    'create': 'property_create',
    'update': 'property_update',
    'partial_update': 'property_update',
    'destroy': 'property_delete',
}


class PropertyPagination(PageNumberPagination):
    """Page-number pagination that also reports the page count."""
    page_size = settings.PROPERTY_PAGE_SIZE
    page_size_query_param = 'page_size'
    max_page_size = settings.PROPERTY_MAX_PAGE_SIZE

    def get_paginated_response(self, data):
        response = super().get_paginated_response(data)
        response.data['total_pages'] = self.page.paginator.num_pages
        return response

    def get_paginated_response_schema(self, schema):
        schema = super().get_paginated_response_schema(schema)
        schema['properties']['total_pages'] = {'type': 'integer', 'example': 1}
        return schema


def property_filter_params(request):
    """Validated list filters from the query string."""
    filter_serializer = PropertyFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)
    return filter_serializer.validated_data


def _invalid_data_response(error):
    return Response(
        {'error': str(error), 'details': error.errors},
        status=status.HTTP_400_BAD_REQUEST
    )


class RuralPropertyViewSet(viewsets.ModelViewSet):
    """
    ViewSet for the operator's rural property records.

    list: Paginated, filterable list of own properties
    create: Create a property (optionally refusing duplicates)
    retrieve: Get a property
    update / partial_update: Change a property
    destroy: Delete a property
    """

    serializer_class = RuralPropertySerializer
    permission_classes = [IsAuthenticated, IsPropertyOwner]
    pagination_class = PropertyPagination

    def get_queryset(self):
        queryset = RuralProperty.objects.filter(user=self.request.user)
        if self.action == 'list':
            queryset = filter_properties(queryset, **property_filter_params(self.request))
        return queryset

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return RuralPropertyWriteSerializer
        return RuralPropertySerializer

    def get_throttles(self):
        scope = THROTTLE_SCOPES.get(self.action)
        if scope is None:
            return []
        self.throttle_scope = scope
        return [ScopedRateThrottle()]

    @extend_schema(
        parameters=[
            OpenApiParameter('search', OpenApiTypes.STR, description='Owner, farm, address, CPF or phone'),
            OpenApiParameter('status', OpenApiTypes.STR, enum=['PENDENTE', 'PAGO', 'ATRASADO']),
            OpenApiParameter('date_from', OpenApiTypes.DATE, description='Due date from (inclusive)'),
            OpenApiParameter('date_to', OpenApiTypes.DATE, description='Due date to (inclusive)'),
            OpenApiParameter('amount_min', OpenApiTypes.DECIMAL),
            OpenApiParameter('amount_max', OpenApiTypes.DECIMAL),
        ],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(responses={201: RuralPropertySerializer})
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        check_duplicates = data.pop('check_duplicates', False)

        try:
            instance = create_property(
                user=request.user,
                data=data,
                check_duplicates=check_duplicates,
            )
        except DuplicatePropertyError as e:
            return Response(
                {'error': str(e), 'existing_id': e.existing.id},
                status=status.HTTP_409_CONFLICT
            )
        except InvalidPropertyDataError as e:
            return _invalid_data_response(e)

        return Response(RuralPropertySerializer(instance).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: RuralPropertySerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop('check_duplicates', None)

        try:
            instance = update_property(property_id=instance.id, user=request.user, data=data)
        except PropertyNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidPropertyDataError as e:
            return _invalid_data_response(e)

        return Response(RuralPropertySerializer(instance).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            delete_property(property_id=instance.id, user=request.user)
        except PropertyNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        request=MarkPaidInputSerializer,
        responses={200: RuralPropertySerializer},
        description="Mark a property as paid (payment date defaults to today).",
    )
    @action(detail=True, methods=['post'], url_path='mark-paid')
    def mark_paid(self, request, pk=None):
        """
        POST /api/properties/{id}/mark-paid/
        Body: {"payment_date": "YYYY-MM-DD"} (optional)
        """
        instance = self.get_object()
        input_serializer = MarkPaidInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        instance = mark_property_paid(
            property_id=instance.id,
            user=request.user,
            payment_date=input_serializer.validated_data.get('payment_date'),
        )
        return Response(RuralPropertySerializer(instance).data)

    @extend_schema(
        request=None,
        responses={200: OpenApiTypes.OBJECT},
        description="Flag own PENDENTE properties past their due date as ATRASADO.",
    )
    @action(detail=False, methods=['post'], url_path='refresh-overdue')
    def refresh_overdue(self, request):
        updated = refresh_overdue_statuses(user=request.user)
        return Response({'updated': updated})

    @extend_schema(
        request=DuplicateCheckSerializer,
        responses={200: DuplicateCheckResponseSerializer},
        description="Check whether a property with this CPF or owner/farm already exists.",
    )
    @action(detail=False, methods=['post'], url_path='check-duplicate')
    def check_duplicate(self, request):
        input_serializer = DuplicateCheckSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        params = input_serializer.validated_data

        existing = find_duplicate(
            user=request.user,
            cpf=params.get('cpf'),
            owner_name=params.get('owner_name'),
            farm_name=params.get('farm_name'),
            exclude_id=params.get('exclude_id'),
        )
        return Response({
            'exists': existing is not None,
            'existing_id': existing.id if existing else None,
            'existing': RuralPropertySerializer(existing).data if existing else None,
        })

    @extend_schema(
        parameters=[OpenApiParameter('letter', OpenApiTypes.STR, required=True)],
        responses={200: PropertyAutocompleteSerializer(many=True)},
        description="Properties whose owner or farm name starts with the given letter.",
    )
    @action(detail=False, methods=['get'])
    def autocomplete(self, request):
        query_serializer = AutocompleteQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        matches = autocomplete_by_letter(
            user=request.user,
            letter=query_serializer.validated_data['letter'],
        )
        return Response(PropertyAutocompleteSerializer(matches, many=True).data)

    @extend_schema(
        request=SyncRequestSerializer,
        responses={200: SyncResponseSerializer},
        description="Replay operations queued while the client was offline.",
    )
    @action(detail=False, methods=['post'])
    def sync(self, request):
        """
        POST /api/properties/sync/
        Body: {"operations": [{"type": "create", "data": {...}, "client_id": "offline_..."}]}
        """
        input_serializer = SyncRequestSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        summary = apply_sync_operations(
            user=request.user,
            operations=input_serializer.validated_data['operations'],
        )
        return Response(summary)
