from app import db
from app.models import Order

from tests.conftest import ALICE_ID, BOB_ID


def test_non_admin_is_denied_before_reading_orders(client, profiles, alice_headers, make_order):
    make_order(ALICE_ID)

    listing = client.get('/api/admin/orders', headers=alice_headers)
    update = client.post('/api/admin/orders/anything/status', headers=alice_headers, json={'status': 'shipped'})

    assert listing.status_code == 403
    assert update.status_code == 403


def test_admin_routes_require_authentication(client):
    assert client.get('/api/admin/orders').status_code == 401


def test_admin_lists_orders_with_items_and_profile(client, profiles, admin_headers, make_order):
    make_order(ALICE_ID)

    data = client.get('/api/admin/orders', headers=admin_headers).get_json()['data']

    assert len(data) == 1
    assert data[0]['profile']['full_name'] == 'Alice Artist'
    assert data[0]['order_items'][0]['size'] == 'A3'


def test_status_change_updates_only_that_order(client, profiles, admin_headers, make_order):
    target = make_order(ALICE_ID)
    other = make_order(BOB_ID)
    target_id, other_id = target.id, other.id
    before = target.updated_at
    other_before = other.updated_at

    response = client.post(f'/api/admin/orders/{target_id}/status', headers=admin_headers,
                           json={'status': 'shipped'})

    assert response.status_code == 200
    body = response.get_json()['data']
    assert body['status'] == 'shipped'
    assert 'order_items' not in body

    db.session.expire_all()
    target = db.session.get(Order, target_id)
    other = db.session.get(Order, other_id)
    assert target.status == 'shipped'
    assert target.updated_at > before
    assert other.status == 'pending'
    assert other.updated_at == other_before


def test_any_status_may_follow_any_other(client, profiles, admin_headers, make_order):
    order = make_order(ALICE_ID, status='delivered')

    response = client.post(f'/api/admin/orders/{order.id}/status', headers=admin_headers,
                           json={'status': 'pending'})

    assert response.status_code == 200


def test_invalid_status_is_rejected(client, profiles, admin_headers, make_order):
    order = make_order(ALICE_ID)

    response = client.post(f'/api/admin/orders/{order.id}/status', headers=admin_headers,
                           json={'status': 'lost'})

    assert response.status_code == 400


def test_missing_status_is_rejected(client, admin_headers):
    response = client.post('/api/admin/orders/anything/status', headers=admin_headers, json={})

    assert response.status_code == 400


def test_unknown_order_is_404(client, admin_headers):
    response = client.post('/api/admin/orders/missing/status', headers=admin_headers,
                           json={'status': 'shipped'})

    assert response.status_code == 404
