import io
from unittest import mock

import pytest
from PIL import Image

from app.services.catalog import check_image_quality, find_size, find_frame, variant_price

from tests.conftest import ALICE_ID


def _png(width, height):
    buffer = io.BytesIO()
    Image.new('RGB', (width, height), color=(200, 180, 150)).save(buffer, format='PNG')
    return buffer.getvalue()


def test_catalog_lists_sizes_and_frames(client):
    body = client.get('/api/catalog').get_json()

    assert [size['id'] for size in body['data']['sizes']] == ['A4', 'A3', 'A2', 'A1', 'A0']
    assert [frame['id'] for frame in body['data']['frames']] == ['none', 'standard', 'premium']


def test_variant_price_adds_size_and_frame(app):
    assert variant_price(find_size('A3'), find_frame('none')) == 699.99
    assert variant_price(find_size('A4'), find_frame('standard')) == 849.98


def test_image_large_enough_has_no_warning(app):
    assert check_image_quality(2480, 3508, find_size('A3')) is None


def test_small_image_recommends_a_smaller_size(app):
    warning = check_image_quality(2000, 3000, find_size('A2'))

    assert warning == (
        "This image might be too small for A2 prints. "
        "We recommend using A4 or smaller for best quality."
    )


def test_image_below_every_size_gets_generic_warning(app):
    warning = check_image_quality(1000, 1200, find_size('A3'))

    assert warning == (
        "This image resolution (1000x1200) might be too low for high-quality prints. "
        "We recommend using images with at least 2480px for the smallest dimension."
    )


@pytest.fixture
def storage_client():
    with mock.patch('app.services.storage.get_storage_client') as factory:
        bucket = factory.return_value.storage.from_.return_value
        bucket.get_public_url.return_value = 'https://project.supabase.co/storage/v1/object/public/uploads/x.png'
        yield factory, bucket


def test_low_resolution_upload_still_succeeds_with_warning(client, alice_headers, storage_client):
    _, bucket = storage_client

    response = client.post(
        '/api/uploads',
        headers=alice_headers,
        data={'size': 'A3', 'file': (io.BytesIO(_png(1000, 1200)), 'photo.png', 'image/png')},
        content_type='multipart/form-data',
    )

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['image_path'].startswith(f'{ALICE_ID}/')
    assert data['image_path'].endswith('.png')
    assert data['quality_warning'].startswith('This image resolution (1000x1200)')
    bucket.upload.assert_called_once()


def test_wrong_file_type_is_rejected_before_storage(client, alice_headers, storage_client):
    factory, _ = storage_client

    response = client.post(
        '/api/uploads',
        headers=alice_headers,
        data={'file': (io.BytesIO(b'GIF89a'), 'anim.gif', 'image/gif')},
        content_type='multipart/form-data',
    )

    assert response.status_code == 400
    body = response.get_json()
    assert body['error'] == 'Please upload a JPG or PNG file'
    assert body['field'] == 'file'
    factory.assert_not_called()


def test_oversized_file_is_rejected_before_storage(app, client, alice_headers, storage_client):
    factory, _ = storage_client
    app.config['MAX_UPLOAD_BYTES'] = 100

    response = client.post(
        '/api/uploads',
        headers=alice_headers,
        data={'file': (io.BytesIO(_png(50, 50) + b'\0' * 200), 'big.png', 'image/png')},
        content_type='multipart/form-data',
    )

    assert response.status_code == 400
    factory.assert_not_called()


def test_upload_requires_authentication(client):
    response = client.post(
        '/api/uploads',
        data={'file': (io.BytesIO(_png(10, 10)), 'photo.png', 'image/png')},
        content_type='multipart/form-data',
    )

    assert response.status_code == 401


def test_delete_only_under_own_prefix(client, alice_headers, storage_client):
    _, bucket = storage_client

    denied = client.delete('/api/uploads', headers=alice_headers, json={'path': 'someone-else/photo.png'})
    allowed = client.delete('/api/uploads', headers=alice_headers, json={'path': f'{ALICE_ID}/photo.png'})

    assert denied.status_code == 403
    assert allowed.status_code == 200
    bucket.remove.assert_called_once_with([f'{ALICE_ID}/photo.png'])


def test_health_reports_database(client):
    body = client.get('/api/health').get_json()

    assert body == {'status': 'ok', 'database': 'connected'}
