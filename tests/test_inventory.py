from datetime import date
from unittest import mock

import pytest

from app.services.inventory import create_sales_order

ITEM = {'name': 'ChartedArt Kit - A3 - No Frame', 'sku': 'CA-A3-NONE', 'rate': 699.99}


def _response(ok=True, payload=None, reason='OK'):
    response = mock.Mock(ok=ok, reason=reason, text='')
    response.json.return_value = payload or {}
    return response


@pytest.fixture
def zoho():
    with mock.patch('app.services.inventory.requests') as requests_mock:
        requests_mock.exceptions.RequestException = Exception
        yield requests_mock


def test_missing_credentials_is_400(app, client, alice_headers, zoho):
    app.config['ZOHO_CLIENT_SECRET'] = None

    response = client.post('/api/inventory', headers=alice_headers, json={'action': 'createItem', 'data': ITEM})

    assert response.status_code == 400
    body = response.get_json()
    assert body['success'] is False
    assert 'ZOHO_CLIENT_SECRET' in body['error']
    zoho.post.assert_not_called()


def test_create_item_sends_fixed_tax(client, alice_headers, zoho):
    zoho.post.side_effect = [
        _response(payload={'access_token': 'token-1'}),
        _response(payload={'code': 0, 'item': {'item_id': '99'}}),
    ]

    response = client.post('/api/inventory', headers=alice_headers, json={'action': 'createItem', 'data': ITEM})

    assert response.status_code == 200
    assert response.get_json()['data']['item']['item_id'] == '99'
    item_call = zoho.post.call_args_list[1]
    assert item_call.kwargs['json']['tax_percentage'] == 15
    assert item_call.kwargs['json']['sku'] == 'CA-A3-NONE'
    assert item_call.kwargs['params'] == {'organization_id': 'org-1'}
    assert item_call.kwargs['headers']['Authorization'] == 'Zoho-oauthtoken token-1'


def test_token_failure_is_400(client, alice_headers, zoho):
    zoho.post.return_value = _response(ok=False, reason='Unauthorized')

    response = client.post('/api/inventory', headers=alice_headers, json={'action': 'createItem', 'data': ITEM})

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Failed to get inventory access token: Unauthorized'


def test_unknown_action_is_400(client, alice_headers, zoho):
    response = client.post('/api/inventory', headers=alice_headers, json={'action': 'deleteItem', 'data': {}})

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Unknown action: deleteItem'


def test_missing_action_is_400(client, alice_headers):
    response = client.post('/api/inventory', headers=alice_headers, json={'data': ITEM})

    assert response.status_code == 400


def test_proxy_requires_authentication(client):
    response = client.post('/api/inventory', json={'action': 'createItem', 'data': ITEM})

    assert response.status_code == 401


def test_sales_order_falls_back_to_contact_search(app, zoho):
    zoho.post.side_effect = [
        _response(ok=False, reason='Bad Request'),
        _response(payload={'salesorder': {'salesorder_id': 'so-1'}}),
    ]
    zoho.get.return_value = _response(payload={'contacts': [{'contact_id': 'c-7'}]})

    result = create_sales_order('token-1', {
        'customer_name': 'Alice Artist',
        'line_items': [{'item_id': '99', 'rate': 699.99, 'quantity': 1}],
        'shipping_address': {'city': 'Cape Town', 'country': 'ZA'},
    }, today=date(2026, 10, 19))

    assert result == {'salesorder': {'salesorder_id': 'so-1'}}
    body = zoho.post.call_args_list[1].kwargs['json']
    assert body['customer_id'] == 'c-7'
    assert body['date'] == '2026-10-19'
    assert body['shipment_date'] == '2026-10-26'
    assert body['shipping_address']['city'] == 'Cape Town'
