from decimal import Decimal
from rest_framework import serializers
from apps.core.sanitization import sanitize_input


class IssueBoletoSerializer(serializers.Serializer):
    """
    Input for issuing a company boleto through Cora.

    ``amount`` defaults to the company's monthly fee; ``fee_year`` and
    ``fee_month`` link the boleto to a registered monthly fee.
    """

    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'), required=False)
    due_date = serializers.DateField()
    description = serializers.CharField(required=False, allow_blank=True, max_length=255)
    fee_year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)
    fee_month = serializers.IntegerField(required=False, min_value=1, max_value=12)

    def validate_description(self, value):
        return sanitize_input(value)

    def validate(self, attrs):
        if ('fee_year' in attrs) != ('fee_month' in attrs):
            raise serializers.ValidationError({
                'fee_month': 'Informe ano e mês da mensalidade juntos'
            })
        return attrs


class CancelRemoteBoletoSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class WebhookEventSerializer(serializers.Serializer):
    """Cora webhook body: ``{"type": "boleto.paid", "data": {"id": ..., "paid_date": ...}}``."""

    type = serializers.CharField(max_length=64)
    data = serializers.DictField(required=False, default=dict)


class WebhookResultSerializer(serializers.Serializer):
    processed = serializers.BooleanField()
    boleto_id = serializers.UUIDField(allow_null=True)
    status = serializers.CharField(allow_null=True)


class BoletoValidationErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
    details = serializers.ListField(child=serializers.CharField())
