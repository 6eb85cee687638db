"""
Domain exceptions for the billing app.

Cora failures are API exceptions so they surface with a gateway status
(502/503) wherever they escape a view; validation and state errors are
plain service errors handled by the views.
"""
from rest_framework.exceptions import APIException


class BillingServiceError(Exception):
    """Base exception for billing service errors."""
    pass


class BoletoValidationError(BillingServiceError):
    """Raised when boleto data would be rejected by Cora."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__('; '.join(self.errors))


class BoletoNotIssuedError(BillingServiceError):
    """Raised when a Cora operation targets a boleto that only exists locally."""
    pass


class QRCodeUnavailableError(BillingServiceError):
    """Raised when a boleto has neither a Pix EMV nor a digitable line."""
    pass


class CoraAPIError(APIException):
    """Cora answered with an error or could not be reached."""
    status_code = 502
    default_detail = 'Erro na comunicação com o Cora.'
    default_code = 'cora_api_error'

    def __init__(self, detail=None, upstream_status=None):
        super().__init__(detail)
        self.upstream_status = upstream_status


class CoraNotConfiguredError(APIException):
    """Neither a static token nor OAuth client credentials are configured."""
    status_code = 503
    default_detail = 'Integração com o Cora não configurada.'
    default_code = 'cora_not_configured'
