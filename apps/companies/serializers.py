from decimal import Decimal
from rest_framework import serializers
from apps.core.formatting import format_cnpj, format_phone
from apps.core.sanitization import sanitize_input
from .models import Company, MonthlyFee, CompanyBoleto, BoletoSchedule, RegimeType


# =============================================================================
# Input Serializers
# =============================================================================

class CompanyWriteSerializer(serializers.ModelSerializer):
    """
    Validate company input for create/update.

    ``regime_type`` is case-insensitive and also accepts ``simples`` for
    Simples Nacional; any other value is rejected.
    """

    regime_type = serializers.CharField(required=False, max_length=20)

    class Meta:
        model = Company
        fields = [
            'name',
            'cnpj',
            'regime_type',
            'email',
            'phone',
            'contact_person',
            'contact_email',
            'contact_phone',
            'boleto_day',
            'boleto_amount',
            'is_active',
        ]
        extra_kwargs = {
            # Accept masked input; stored as digits by the service layer
            'cnpj': {'max_length': 18},
            'phone': {'max_length': 20},
            'contact_phone': {'max_length': 20},
        }

    def to_internal_value(self, data):
        if hasattr(data, 'dict'):
            data = data.dict()
        if isinstance(data, dict):
            data = {key: sanitize_input(value) for key, value in data.items()}
        return super().to_internal_value(data)

    def validate_regime_type(self, value):
        value = value.strip().upper()
        if value in RegimeType.values:
            return value
        if value == 'SIMPLES':
            return RegimeType.SIMPLES_NACIONAL
        raise serializers.ValidationError('Regime deve ser MEI ou SIMPLES_NACIONAL')


class YearQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)


class MonthlyFeeInputSerializer(serializers.Serializer):
    """Fee for one month; amount and due date fall back to the company's billing settings."""

    year = serializers.IntegerField(min_value=2000, max_value=2100)
    month = serializers.IntegerField(min_value=1, max_value=12)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    due_date = serializers.DateField(required=False)


class BoletoCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'), required=False)
    due_date = serializers.DateField()
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    fee_year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)
    fee_month = serializers.IntegerField(required=False, min_value=1, max_value=12)

    def validate(self, attrs):
        if ('fee_year' in attrs) != ('fee_month' in attrs):
            raise serializers.ValidationError({
                'fee_month': 'Informe ano e mês da mensalidade juntos'
            })
        return attrs


class BoletoUpdateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'), required=False)
    due_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class MarkBoletoPaidSerializer(serializers.Serializer):
    payment_date = serializers.DateField(required=False)


class MarkBoletoSentSerializer(serializers.Serializer):
    email = serializers.EmailField()


class CancelBoletoSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class BoletoScheduleSerializer(serializers.ModelSerializer):
    """Schedule input and output; ``company`` comes from the URL."""

    class Meta:
        model = BoletoSchedule
        fields = ['id', 'schedule_day', 'schedule_time', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


# =============================================================================
# Output Serializers
# =============================================================================

class CompanySerializer(serializers.ModelSerializer):
    """Full company representation."""

    regime_type_display = serializers.CharField(source='get_regime_type_display', read_only=True)
    cnpj_formatted = serializers.SerializerMethodField()
    phone_formatted = serializers.SerializerMethodField()
    last_boleto_date = serializers.DateField(read_only=True, allow_null=True, default=None)

    class Meta:
        model = Company
        fields = [
            'id',
            'name',
            'cnpj',
            'cnpj_formatted',
            'regime_type',
            'regime_type_display',
            'email',
            'phone',
            'phone_formatted',
            'contact_person',
            'contact_email',
            'contact_phone',
            'boleto_day',
            'boleto_amount',
            'is_active',
            'last_boleto_date',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_cnpj_formatted(self, obj):
        return format_cnpj(obj.cnpj)

    def get_phone_formatted(self, obj):
        return format_phone(obj.phone)


class CompanyMinimalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = ['id', 'name', 'cnpj', 'regime_type']
        read_only_fields = fields


class MonthlyFeeSerializer(serializers.ModelSerializer):
    display_status = serializers.SerializerMethodField()

    class Meta:
        model = MonthlyFee
        fields = ['id', 'year', 'month', 'amount', 'due_date', 'status', 'display_status', 'paid_at']
        read_only_fields = fields

    def get_display_status(self, obj):
        return obj.display_status()


class FeeMonthSerializer(serializers.Serializer):
    month = serializers.IntegerField()
    label = serializers.CharField()
    fee = MonthlyFeeSerializer(allow_null=True)
    status = serializers.CharField(allow_null=True)


class FeeTotalsSerializer(serializers.Serializer):
    paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    pending = serializers.DecimalField(max_digits=12, decimal_places=2)
    overdue = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_count = serializers.IntegerField()
    pending_count = serializers.IntegerField()
    overdue_count = serializers.IntegerField()


class FeeOverviewSerializer(serializers.Serializer):
    company_id = serializers.UUIDField()
    year = serializers.IntegerField()
    months = FeeMonthSerializer(many=True)
    totals = FeeTotalsSerializer()


class CompanyBoletoSerializer(serializers.ModelSerializer):
    """Boleto with its company and, when issued through Cora, the remote fields."""

    company = CompanyMinimalSerializer(read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    monthly_fee = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = CompanyBoleto
        fields = [
            'id',
            'company',
            'monthly_fee',
            'boleto_number',
            'amount',
            'due_date',
            'issue_date',
            'status',
            'status_display',
            'payment_date',
            'sent_date',
            'sent_to_email',
            'notes',
            'external_id',
            'barcode',
            'digitable_line',
            'pdf_url',
            'pix_emv',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
