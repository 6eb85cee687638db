from rest_framework import serializers
from apps.core.sanitization import sanitize_input
from apps.properties.serializers import PropertyFilterSerializer


class PropertyExportQuerySerializer(PropertyFilterSerializer):
    """
    Property list filters plus export options.

    Query Parameters:
        format (str): csv, pdf or xlsx
        title (str): PDF title override
    """

    format = serializers.CharField(required=False, default='csv', max_length=10)
    title = serializers.CharField(required=False, allow_blank=True, max_length=120)

    def validate_title(self, value):
        return sanitize_input(value)


class CompanyExportQuerySerializer(serializers.Serializer):
    format = serializers.CharField(required=False, default='csv', max_length=10)
    year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
