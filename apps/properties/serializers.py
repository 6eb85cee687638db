from rest_framework import serializers
from apps.core.formatting import format_cpf, format_phone
from apps.core.sanitization import sanitize_input
from .models import RuralProperty, PaymentStatus


# =============================================================================
# Input Serializers
# =============================================================================

class PropertyFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for property filtering.

    Query Parameters:
        search (str): Substring over owner, farm, address, CPF and phone
        status (str): Payment status
        date_from (date): Due date lower bound (inclusive)
        date_to (date): Due date upper bound (inclusive)
        amount_min (decimal): Amount lower bound (inclusive)
        amount_max (decimal): Amount upper bound (inclusive)
    """

    search = serializers.CharField(required=False, allow_blank=True, max_length=100)
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    amount_min = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)
    amount_max = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)

    def validate_search(self, value):
        return sanitize_input(value)

    def validate(self, attrs):
        """Validate date and amount ranges."""
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'Data final deve ser posterior à data inicial'
            })

        amount_min = attrs.get('amount_min')
        amount_max = attrs.get('amount_max')
        if amount_min is not None and amount_max is not None and amount_min > amount_max:
            raise serializers.ValidationError({
                'amount_max': 'Valor máximo deve ser maior que o valor mínimo'
            })

        return attrs


class RuralPropertyWriteSerializer(serializers.ModelSerializer):
    """
    Validate property input for create/update.

    Text is sanitized before field validation runs.
    """

    check_duplicates = serializers.BooleanField(write_only=True, required=False, default=False)

    class Meta:
        model = RuralProperty
        fields = [
            'owner_name',
            'farm_name',
            'address',
            'cpf',
            'phone',
            'ccir',
            'itr',
            'amount',
            'due_date',
            'payment_status',
            'payment_date',
            'check_duplicates',
        ]
        extra_kwargs = {
            # Accept formatted input; stored as digits by the service layer
            'cpf': {'max_length': 14},
            'phone': {'max_length': 20},
        }

    def to_internal_value(self, data):
        if hasattr(data, 'dict'):
            data = data.dict()
        if isinstance(data, dict):
            data = {key: sanitize_input(value) for key, value in data.items()}
        return super().to_internal_value(data)


class DuplicateCheckSerializer(serializers.Serializer):
    cpf = serializers.CharField(required=False, allow_blank=True, max_length=14)
    owner_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    farm_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    exclude_id = serializers.IntegerField(required=False)


class MarkPaidInputSerializer(serializers.Serializer):
    payment_date = serializers.DateField(required=False)


class AutocompleteQuerySerializer(serializers.Serializer):
    letter = serializers.RegexField(r'^\w$', max_length=1)


class SyncOperationSerializer(serializers.Serializer):
    """
    One queued offline operation.

    ``type`` is checked per item by apply_sync_operations, so an unknown
    type fails only that item.
    """

    type = serializers.CharField(max_length=20, help_text="create, update or delete")
    data = serializers.DictField()
    client_id = serializers.CharField(required=False, allow_blank=True, max_length=64)
    # Informational only; operations replay in queue order
    timestamp = serializers.CharField(required=False, allow_blank=True, max_length=64)


class SyncRequestSerializer(serializers.Serializer):
    operations = SyncOperationSerializer(many=True, allow_empty=True)


# =============================================================================
# Output Serializers
# =============================================================================

class RuralPropertySerializer(serializers.ModelSerializer):
    """Full property representation."""

    payment_status_display = serializers.CharField(source='get_payment_status_display', read_only=True)
    cpf_formatted = serializers.SerializerMethodField()
    phone_formatted = serializers.SerializerMethodField()
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = RuralProperty
        fields = [
            'id',
            'owner_name',
            'farm_name',
            'address',
            'cpf',
            'cpf_formatted',
            'phone',
            'phone_formatted',
            'ccir',
            'itr',
            'amount',
            'due_date',
            'payment_status',
            'payment_status_display',
            'payment_date',
            'is_overdue',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_cpf_formatted(self, obj):
        return format_cpf(obj.cpf)

    def get_phone_formatted(self, obj):
        return format_phone(obj.phone)


class PropertyAutocompleteSerializer(serializers.ModelSerializer):
    class Meta:
        model = RuralProperty
        fields = ['id', 'owner_name', 'farm_name', 'cpf', 'address', 'amount']
        read_only_fields = fields


class DuplicateCheckResponseSerializer(serializers.Serializer):
    exists = serializers.BooleanField()
    existing_id = serializers.IntegerField(allow_null=True)
    existing = RuralPropertySerializer(allow_null=True)


class SyncResultSerializer(serializers.Serializer):
    index = serializers.IntegerField()
    type = serializers.CharField()
    status = serializers.CharField()
    id = serializers.IntegerField(required=False)
    client_id = serializers.CharField(required=False)
    error = serializers.CharField(required=False)


class SyncResponseSerializer(serializers.Serializer):
    synced = serializers.IntegerField()
    failed = serializers.IntegerField()
    results = SyncResultSerializer(many=True)
    last_sync = serializers.DateTimeField()
