import pytest
import requests
from datetime import date
from decimal import Decimal
from unittest.mock import Mock, patch, ANY
from apps.billing.cora import CoraClient, to_centavos, from_centavos, normalize_boleto
from apps.billing.exceptions import CoraAPIError, CoraNotConfiguredError


BASE_URL = 'https://cora.test'


def make_response(status_code=200, json_data=None, content=b'', reason='OK'):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    response.content = content or (b'{}' if json_data is not None else b'')
    if json_data is None:
        response.json.side_effect = ValueError('No JSON object could be decoded')
    else:
        response.json.return_value = json_data
    return response


def make_client(session, **overrides):
    options = {
        'base_url': BASE_URL,
        'client_id': '',
        'client_secret': '',
        'token': '',
        'timeout': 5,
        'session': session,
    }
    options.update(overrides)
    return CoraClient(**options)


BOLETO_PAYLOAD = {
    'id': 'bol_1',
    'nossoNumero': '000789',
    'codigoBarras': '2379000000',
    'amount': 15000,
    'dueDate': '2030-01-10',
    'status': 'issued',
    'pix': {'emv': '000201pix'},
}


# =============================================================================
# Amount Conversion / Normalization
# =============================================================================

class TestConversions:

    def test_to_centavos_rounds_half_up(self):
        assert to_centavos(Decimal('89.90')) == 8990
        assert to_centavos('10.005') == 1001
        assert to_centavos(150) == 15000

    def test_from_centavos(self):
        assert from_centavos(15050) == Decimal('150.50')
        assert from_centavos(None) is None

    def test_normalize_accepts_alternative_names(self):
        normalized = normalize_boleto(BOLETO_PAYLOAD)

        assert normalized['boleto_number'] == '000789'
        assert normalized['barcode'] == '2379000000'
        assert normalized['due_date'] == '2030-01-10'
        assert normalized['amount'] == Decimal('150.00')
        assert normalized['pix_emv'] == '000201pix'
        assert normalized['pdf_url'] == ''


# =============================================================================
# Authentication
# =============================================================================

class TestCoraAuthentication:

    def test_static_token_skips_oauth(self):
        session = Mock()
        session.request.return_value = make_response(json_data=BOLETO_PAYLOAD)
        client = make_client(session, token='static-token')

        client.get_boleto('bol_1')

        session.request.assert_called_once()
        method, url = session.request.call_args.args
        assert (method, url) == ('GET', f'{BASE_URL}/v1/boletos/bol_1')
        assert session.request.call_args.kwargs['headers']['Authorization'] == 'Bearer static-token'
        assert session.request.call_args.kwargs['timeout'] == 5

    def test_oauth_token_is_cached(self):
        session = Mock()
        session.request.side_effect = [
            make_response(json_data={'access_token': 'oauth-token', 'expires_in': 3600}),
            make_response(json_data=BOLETO_PAYLOAD),
            make_response(json_data=BOLETO_PAYLOAD),
        ]
        client = make_client(session, client_id='id', client_secret='secret')

        client.get_boleto('bol_1')
        client.get_boleto('bol_1')

        assert session.request.call_count == 3
        auth_call = session.request.call_args_list[0]
        assert auth_call.args == ('POST', f'{BASE_URL}/auth/oauth')
        assert auth_call.kwargs['data']['grant_type'] == 'client_credentials'
        assert auth_call.kwargs['data']['scope'] == 'boletos.create boletos.read'
        assert 'Authorization' not in auth_call.kwargs['headers']
        assert session.request.call_args.kwargs['headers']['Authorization'] == 'Bearer oauth-token'

    def test_failed_request_is_logged_with_arguments(self):
        session = Mock()
        session.request.return_value = make_response(status_code=404, json_data={'message': 'not found'}, reason='Not Found')
        client = make_client(session, token='static-token')

        with patch('apps.billing.cora.logger') as log:
            with pytest.raises(CoraAPIError):
                client.get_boleto('bol_404')

        log.warning.assert_called_once_with(
            'Cora %s %s -> %s: %s', 'GET', '/v1/boletos/bol_404', 404, ANY,
        )

    def test_expired_token_is_renewed(self):
        session = Mock()
        session.request.side_effect = [
            make_response(json_data={'access_token': 'first', 'expires_in': 0}),
            make_response(json_data=BOLETO_PAYLOAD),
            make_response(json_data={'access_token': 'second', 'expires_in': 0}),
            make_response(json_data=BOLETO_PAYLOAD),
        ]
        client = make_client(session, client_id='id', client_secret='secret')

        client.get_boleto('bol_1')
        client.get_boleto('bol_1')

        assert session.request.call_count == 4
        assert session.request.call_args.kwargs['headers']['Authorization'] == 'Bearer second'

    def test_missing_credentials(self):
        client = make_client(Mock())

        assert client.is_configured is False
        with pytest.raises(CoraNotConfiguredError):
            client.get_boleto('bol_1')


# =============================================================================
# Boleto Endpoints
# =============================================================================

class TestCoraBoletos:

    def test_create_boleto(self):
        session = Mock()
        session.request.return_value = make_response(json_data=BOLETO_PAYLOAD)
        client = make_client(session, token='t')

        created = client.create_boleto({'amount': 15000, 'due_date': '2030-01-10'})

        assert created['id'] == 'bol_1'
        assert created['amount'] == Decimal('150.00')
        assert session.request.call_args.args == ('POST', f'{BASE_URL}/v1/boletos')
        assert session.request.call_args.kwargs['json']['amount'] == 15000

    def test_list_boletos_sends_filters(self):
        session = Mock()
        session.request.return_value = make_response(json_data={'data': [BOLETO_PAYLOAD], 'total': 1})
        client = make_client(session, token='t')

        result = client.list_boletos(status='paid', start_date=date(2030, 1, 1), limit=10)

        params = session.request.call_args.kwargs['params']
        assert params == {'limit': 10, 'offset': 0, 'status': 'paid', 'start_date': '2030-01-01'}
        assert result['total'] == 1
        assert result['boletos'][0]['id'] == 'bol_1'

    def test_get_boleto_pdf_returns_bytes(self):
        session = Mock()
        session.request.return_value = make_response(content=b'%PDF-1.4')
        client = make_client(session, token='t')

        content = client.get_boleto_pdf('bol_1')

        assert content == b'%PDF-1.4'
        assert session.request.call_args.kwargs['headers']['Accept'] == 'application/pdf'

    def test_cancel_boleto_with_empty_body(self):
        session = Mock()
        session.request.return_value = make_response(status_code=204)
        client = make_client(session, token='t')

        assert client.cancel_boleto('bol_1') == {}
        assert session.request.call_args.args == ('POST', f'{BASE_URL}/v1/boletos/bol_1/cancel')

    def test_register_webhook_default_events(self):
        session = Mock()
        session.request.return_value = make_response(json_data={'id': 'wh_1'})
        client = make_client(session, token='t')

        result = client.register_webhook('https://app.example.com/api/billing/webhook/')

        assert result == {'id': 'wh_1'}
        assert session.request.call_args.kwargs['json']['events'] == ['boleto.paid', 'boleto.overdue']


# =============================================================================
# Error Handling
# =============================================================================

class TestCoraErrors:

    def test_api_message_is_kept(self):
        session = Mock()
        session.request.return_value = make_response(
            status_code=422,
            json_data={'message': 'Data de vencimento inválida'},
            reason='Unprocessable Entity',
        )
        client = make_client(session, token='t')

        with pytest.raises(CoraAPIError) as exc_info:
            client.create_boleto({'amount': 100})

        assert str(exc_info.value) == 'Data de vencimento inválida'
        assert exc_info.value.upstream_status == 422
        assert exc_info.value.status_code == 502

    def test_error_without_json_body(self):
        session = Mock()
        session.request.return_value = make_response(status_code=500, reason='Internal Server Error')
        client = make_client(session, token='t')

        with pytest.raises(CoraAPIError) as exc_info:
            client.get_boleto('bol_1')

        assert '500' in str(exc_info.value)

    def test_network_failure(self):
        session = Mock()
        session.request.side_effect = requests.ConnectionError('connection refused')
        client = make_client(session, token='t')

        with pytest.raises(CoraAPIError):
            client.get_boleto('bol_1')
