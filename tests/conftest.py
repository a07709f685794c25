"""Pytest configuration: app factory on in-memory SQLite and Supabase-style tokens."""

import time
import uuid
from datetime import timedelta

import jwt
import pytest

from app import create_app, db
from app.config import Config
from app.models import (
    Profile, AdminUser, Competition, GallerySubmission, CompetitionSubmission,
    Order, OrderItem, Event, Initiative,
)
from app.utils.general import utcnow

JWT_SECRET = 'test-supabase-jwt-secret-0123456789abcdef0123456789'

ALICE_ID = '11111111-1111-4111-8111-111111111111'
BOB_ID = '22222222-2222-4222-8222-222222222222'
ADMIN_ID = '33333333-3333-4333-8333-333333333333'


class AppConfigForTests(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'test-secret-key'
    SUPABASE_URL = 'https://project.supabase.co'
    SUPABASE_JWT_SECRET = JWT_SECRET
    SUPABASE_SERVICE_ROLE_KEY = 'service-role-key'
    ZOHO_CLIENT_ID = 'zoho-client'
    ZOHO_CLIENT_SECRET = 'zoho-secret'
    ZOHO_REFRESH_TOKEN = 'zoho-refresh'
    ZOHO_ORGANIZATION_ID = 'org-1'
    ZOHO_SALES_ACCOUNT_ID = 'acct-1'
    ZOHO_TAX_ID = 'tax-1'
    INVENTORY_SYNC_INLINE = True
    CART_STREAM_HEARTBEAT = 0.05


def make_token(user_id, email, full_name=None, expires_in=3600,
               audience='authenticated', secret=JWT_SECRET):
    payload = {
        'sub': user_id,
        'email': email,
        'aud': audience,
        'exp': int(time.time()) + expires_in,
        'user_metadata': {'full_name': full_name} if full_name else {},
    }
    return jwt.encode(payload, secret, algorithm='HS256')


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def app():
    app = create_app(AppConfigForTests)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def alice_headers():
    return bearer(make_token(ALICE_ID, 'alice@example.com', 'Alice Artist'))


@pytest.fixture
def bob_headers():
    return bearer(make_token(BOB_ID, 'bob@example.com', 'Bob Builder'))


@pytest.fixture
def admin_headers(app):
    db.session.add(Profile(id=ADMIN_ID, email='admin@example.com', full_name='Site Admin'))
    db.session.add(AdminUser(user_id=ADMIN_ID))
    db.session.commit()
    return bearer(make_token(ADMIN_ID, 'admin@example.com', 'Site Admin'))


@pytest.fixture
def profiles(app):
    alice = Profile(id=ALICE_ID, email='alice@example.com', full_name='Alice Artist')
    bob = Profile(id=BOB_ID, email='bob@example.com', full_name='Bob Builder')
    db.session.add_all([alice, bob])
    db.session.commit()
    return alice, bob


@pytest.fixture
def make_competition(app):
    def _make(start_offset=timedelta(days=-1), end_offset=timedelta(days=7), is_active=True, title='Spring Colours'):
        now = utcnow()
        competition = Competition(
            title=title,
            theme='Colour',
            start_date=now + start_offset,
            end_date=now + end_offset,
            is_active=is_active,
        )
        db.session.add(competition)
        db.session.commit()
        return competition
    return _make


@pytest.fixture
def make_gallery_piece(app):
    def _make(user_id, is_approved=True, title='Sunset'):
        piece = GallerySubmission(
            user_id=user_id,
            title=title,
            image_url=f'https://cdn.example.com/{uuid.uuid4().hex}.jpg',
            is_approved=is_approved,
        )
        db.session.add(piece)
        db.session.commit()
        return piece
    return _make


@pytest.fixture
def make_entry(app):
    def _make(competition, piece):
        entry = CompetitionSubmission(
            competition_id=competition.id,
            submission_id=piece.id,
            user_id=piece.user_id,
        )
        db.session.add(entry)
        db.session.commit()
        return entry
    return _make


@pytest.fixture
def make_order(app):
    def _make(user_id, status='pending', total=699.99):
        order = Order(user_id=user_id, status=status, total_amount=total,
                      shipping_address={'city': 'Cape Town', 'country': 'ZA'})
        order.order_items.append(OrderItem(size='A3', frame_type='none', quantity=1, price=total,
                                           image_url='https://cdn.example.com/a.jpg'))
        db.session.add(order)
        db.session.commit()
        return order
    return _make


@pytest.fixture
def make_event(app):
    def _make(organizer_id, days_ahead=10, is_approved=True, with_initiative=True):
        event = Event(title='Community Mural Day', event_date=utcnow() + timedelta(days=days_ahead),
                      location_name='Company Gardens', is_approved=is_approved)
        db.session.add(event)
        db.session.flush()
        initiative = None
        if with_initiative:
            initiative = Initiative(title='Art for Action', description='Paint the town',
                                    organizer_id=organizer_id, related_event_id=event.id)
            db.session.add(initiative)
            db.session.flush()
            event.initiative_id = initiative.id
        db.session.commit()
        return event, initiative
    return _make
