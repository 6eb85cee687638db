"""
Cora API Client
===============

HTTP client for the Cora boleto API, built on a ``requests.Session``.

Authentication is OAuth2 client credentials against ``/auth/oauth``; the
access token is cached until it expires. When ``CORA_TOKEN`` is set it is
used as a bearer token directly and OAuth is skipped.

Cora works in centavos. Payloads sent to :meth:`CoraClient.create_boleto`
must already carry ``amount`` in centavos (see :func:`to_centavos`); every
boleto read back is normalized by :func:`normalize_boleto`, which converts
the amount to reais and flattens Cora's alternative field names.

Example:
    Issuing and fetching a boleto::

        client = get_client()
        created = client.create_boleto({
            'amount': to_centavos(Decimal('150.00')),
            'due_date': '2024-05-10',
            ...
        })
        client.get_boleto(created['id'])['status']
"""

from decimal import Decimal, ROUND_HALF_UP
import logging
import time

import requests
from django.conf import settings

from .exceptions import CoraAPIError, CoraNotConfiguredError

logger = logging.getLogger(__name__)

OAUTH_SCOPE = 'boletos.create boletos.read'
DEFAULT_WEBHOOK_EVENTS = ('boleto.paid', 'boleto.overdue')
# Seconds shaved off ``expires_in`` so a token is never used at the edge of expiry
TOKEN_EXPIRY_MARGIN = 30


def to_centavos(value) -> int:
    """Reais to integer centavos, rounding half up."""
    return int((Decimal(str(value)) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def from_centavos(value):
    if value in (None, ''):
        return None
    return (Decimal(str(value)) / 100).quantize(Decimal('0.01'))


def _first(payload: dict, *keys, default=None):
    for key in keys:
        value = payload.get(key)
        if value not in (None, ''):
            return value
    return default


def normalize_boleto(payload: dict) -> dict:
    """Flatten a Cora boleto into the field names used by CompanyBoleto."""
    pix = payload.get('pix') or {}
    return {
        'id': _first(payload, 'id'),
        'boleto_number': _first(payload, 'boleto_number', 'boletoNumber', 'our_number', 'nossoNumero', default=''),
        'barcode': _first(payload, 'barcode', 'codigoBarras', default=''),
        'digitable_line': _first(payload, 'digitable_line', 'digitableLine', 'linhaDigitavel', default=''),
        'pdf_url': _first(payload, 'pdf_url', 'pdfUrl', 'bank_slip_url', 'url', default=''),
        'pix_emv': _first(pix, 'emv', default='') or _first(payload, 'pix_emv', default=''),
        'amount': from_centavos(payload.get('amount')),
        'due_date': _first(payload, 'due_date', 'dueDate'),
        'status': _first(payload, 'status', default='issued'),
        'paid_at': _first(payload, 'paid_at', 'paidDate', 'paid_date'),
        'created_at': _first(payload, 'created_at', 'createdAt'),
    }


class CoraClient:
    """
    Client for the Cora boleto endpoints.

    Every argument falls back to the matching ``CORA_*`` setting, so
    ``CoraClient()`` is ready to use in a configured deployment.
    """

    def __init__(
        self,
        *,
        base_url=None,
        client_id=None,
        client_secret=None,
        token=None,
        timeout=None,
        session=None,
    ):
        self.base_url = (base_url or settings.CORA_API_URL).rstrip('/')
        self.client_id = settings.CORA_CLIENT_ID if client_id is None else client_id
        self.client_secret = settings.CORA_CLIENT_SECRET if client_secret is None else client_secret
        self.static_token = settings.CORA_TOKEN if token is None else token
        self.timeout = timeout or settings.CORA_TIMEOUT
        self.session = session or requests.Session()

        self._access_token = None
        self._token_expires_at = 0.0

    @property
    def is_configured(self) -> bool:
        return bool(self.static_token or (self.client_id and self.client_secret))

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def authenticate(self) -> str:
        """
        Return a bearer token, requesting a new one when the cached token expired.

        Raises:
            CoraNotConfiguredError: If no static token or client credentials are set
            CoraAPIError: If Cora refuses the credentials
        """
        if self.static_token:
            return self.static_token
        if not (self.client_id and self.client_secret):
            raise CoraNotConfiguredError()

        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        response = self._send(
            'POST',
            '/auth/oauth',
            authenticated=False,
            data={
                'grant_type': 'client_credentials',
                'client_id': self.client_id,
                'client_secret': self.client_secret,
                'scope': OAUTH_SCOPE,
            },
        )
        payload = response.json()

        self._access_token = payload['access_token']
        expires_in = int(payload.get('expires_in') or 0)
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)

        logger.info("Cora access token obtained (expires in %ss)", expires_in)
        return self._access_token

    def _send(self, method, path, *, authenticated=True, headers=None, **kwargs):
        request_headers = {'Accept': 'application/json'}
        if headers:
            request_headers.update(headers)
        if authenticated:
            request_headers['Authorization'] = f'Bearer {self.authenticate()}'

        url = f'{self.base_url}{path}'
        try:
            response = self.session.request(
                method,
                url,
                headers=request_headers,
                timeout=self.timeout,
                **kwargs
            )
        except requests.RequestException as e:
            logger.error("Cora request %s %s failed: %s", method, path, e)
            raise CoraAPIError(f'Falha de comunicação com o Cora: {e}')

        if not response.ok:
            message = self._error_message(response)
            logger.warning("Cora %s %s -> %s: %s", method, path, response.status_code, message)
            raise CoraAPIError(message, upstream_status=response.status_code)

        return response

    @staticmethod
    def _error_message(response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get('message'):
            return payload['message']
        return f'Erro na API Cora: {response.status_code} - {response.reason}'

    @staticmethod
    def _json_or_empty(response) -> dict:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    # -------------------------------------------------------------------------
    # Boletos
    # -------------------------------------------------------------------------

    def create_boleto(self, payload: dict) -> dict:
        """POST /v1/boletos; ``payload['amount']`` is in centavos."""
        response = self._send('POST', '/v1/boletos', json=payload)
        created = normalize_boleto(response.json())
        logger.info("Cora boleto %s created (%s)", created['id'], created['amount'])
        return created

    def get_boleto(self, boleto_id) -> dict:
        response = self._send('GET', f'/v1/boletos/{boleto_id}')
        return normalize_boleto(response.json())

    def list_boletos(self, *, status=None, start_date=None, end_date=None, limit=50, offset=0) -> dict:
        params = {'limit': limit, 'offset': offset}
        if status:
            params['status'] = status
        if start_date:
            params['start_date'] = start_date.isoformat() if hasattr(start_date, 'isoformat') else start_date
        if end_date:
            params['end_date'] = end_date.isoformat() if hasattr(end_date, 'isoformat') else end_date

        payload = self._send('GET', '/v1/boletos', params=params).json()
        items = payload.get('data', []) if isinstance(payload, dict) else payload
        return {
            'boletos': [normalize_boleto(item) for item in items],
            'total': payload.get('total', len(items)) if isinstance(payload, dict) else len(items),
            'limit': limit,
            'offset': offset,
        }

    def get_boleto_pdf(self, boleto_id) -> bytes:
        response = self._send(
            'GET',
            f'/v1/boletos/{boleto_id}/pdf',
            headers={'Accept': 'application/pdf'},
        )
        return response.content

    def cancel_boleto(self, boleto_id) -> dict:
        response = self._send('POST', f'/v1/boletos/{boleto_id}/cancel', json={})
        logger.info("Cora boleto %s cancelled", boleto_id)
        return self._json_or_empty(response)

    def register_webhook(self, url, events=DEFAULT_WEBHOOK_EVENTS) -> dict:
        response = self._send('POST', '/v1/webhooks', json={'url': url, 'events': list(events)})
        logger.info("Cora webhook registered for %s (%s)", url, ', '.join(events))
        return self._json_or_empty(response)


_default_client = None


def get_client() -> CoraClient:
    """Process-wide client, so the OAuth token is shared between requests."""
    global _default_client
    if _default_client is None:
        _default_client = CoraClient()
    return _default_client
