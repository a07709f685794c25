from app import db
from app.models import Profile

from tests.conftest import ALICE_ID, make_token, bearer


def test_me_requires_authorization_header(client):
    response = client.get('/auth/me')

    assert response.status_code == 401
    assert response.get_json()['message'] == 'Missing Authorization header'


def test_malformed_header_is_rejected(client):
    response = client.get('/auth/me', headers={'Authorization': 'Token abc'})

    assert response.status_code == 401


def test_expired_token_is_rejected(client):
    token = make_token(ALICE_ID, 'alice@example.com', expires_in=-60)

    response = client.get('/auth/me', headers=bearer(token))

    assert response.status_code == 401
    assert response.get_json()['message'] == 'Token has expired'


def test_wrong_audience_is_rejected(client):
    token = make_token(ALICE_ID, 'alice@example.com', audience='anon')

    response = client.get('/auth/me', headers=bearer(token))

    assert response.status_code == 401
    assert response.get_json()['message'] == 'Invalid token audience'


def test_token_signed_with_other_secret_is_rejected(client):
    token = make_token(ALICE_ID, 'alice@example.com', secret='another-secret-0123456789abcdef0123456789')

    response = client.get('/auth/me', headers=bearer(token))

    assert response.status_code == 401


def test_me_provisions_profile_and_reports_capabilities(client, alice_headers):
    response = client.get('/auth/me', headers=alice_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body['user_id'] == ALICE_ID
    assert body['full_name'] == 'Alice Artist'
    assert body['is_admin'] is False

    profile = db.session.get(Profile, ALICE_ID)
    assert profile.email == 'alice@example.com'


def test_profile_is_resynced_when_claims_change(client, alice_headers):
    client.get('/auth/me', headers=alice_headers)

    token = make_token(ALICE_ID, 'alice@new.example.com', 'Alice A.')
    client.get('/auth/me', headers=bearer(token))

    profile = db.session.get(Profile, ALICE_ID)
    assert profile.email == 'alice@new.example.com'
    assert profile.full_name == 'Alice A.'


def test_full_name_falls_back_to_email_prefix(client):
    token = make_token(ALICE_ID, 'alice@example.com')

    body = client.get('/auth/me', headers=bearer(token)).get_json()

    assert body['full_name'] == 'alice'


def test_me_reports_admin_from_admin_users(client, admin_headers):
    body = client.get('/auth/me', headers=admin_headers).get_json()

    assert body['is_admin'] is True


def test_optional_auth_still_rejects_invalid_token(client):
    response = client.get('/api/cart/count', headers={'Authorization': 'Bearer not-a-jwt'})

    assert response.status_code == 401
