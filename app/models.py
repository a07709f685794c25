# models.py

import uuid
from . import db
from app.utils.general import utcnow
# --------------------------------------------------

# This file defines the structure of the database tables using Python classes.
# The tables live in the Supabase Postgres database; ids are UUID strings so
# they line up with Supabase Auth user ids.


def _uuid():
    return str(uuid.uuid4())


def _isoformat(value):
    return value.isoformat() if value else None


# --- 1. PROFILE / ADMIN MODELS ---

class Profile(db.Model):
    """
    Public profile for an authenticated user.
    The id is the Supabase Auth user id ('sub' claim); rows are provisioned
    just-in-time from JWT claims.
    """
    __tablename__ = 'profiles'

    id = db.Column(db.String(36), primary_key=True)
    email = db.Column(db.String(255), index=True, nullable=False)
    full_name = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f'<Profile {self.email}>'

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'full_name': self.full_name,
            'created_at': _isoformat(self.created_at),
        }


class AdminUser(db.Model):
    """A row here grants the admin role to the referenced user."""
    __tablename__ = 'admin_users'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)


# --- 2. CATALOG / CART MODELS ---

class Product(db.Model):
    """
    A product variant: one row per (size, frame_type) pair.
    base_price is size price + frame price captured at creation time.
    """
    __tablename__ = 'products'
    __table_args__ = (
        db.UniqueConstraint('size', 'frame_type', name='uq_products_size_frame'),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    size = db.Column(db.String(8), nullable=False)
    frame_type = db.Column(db.String(32), nullable=False)
    base_price = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'size': self.size,
            'frame_type': self.frame_type,
            'base_price': self.base_price,
            'created_at': _isoformat(self.created_at),
        }


class Cart(db.Model):
    __tablename__ = 'carts'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    items = db.relationship('CartItem', backref='cart', lazy=True, cascade="all, delete-orphan",
                            order_by='CartItem.created_at')


class CartItem(db.Model):
    __tablename__ = 'cart_items'
    __table_args__ = (
        db.CheckConstraint('quantity >= 1', name='ck_cart_items_quantity_positive'),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    cart_id = db.Column(db.String(36), db.ForeignKey('carts.id'), nullable=False, index=True)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id'), nullable=False)
    image_url = db.Column(db.String(1024))
    price = db.Column(db.Float, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    product = db.relationship('Product', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'cart_id': self.cart_id,
            'product_id': self.product_id,
            'image_url': self.image_url,
            'price': self.price,
            'quantity': self.quantity,
            'created_at': _isoformat(self.created_at),
            'product': self.product.to_dict() if self.product else None,
        }


class InventorySyncTask(db.Model):
    """
    Outbox row for mirroring catalog changes into the inventory system.
    Written in the same transaction as the change it mirrors; pushed
    best-effort afterwards.
    """
    __tablename__ = 'inventory_sync_tasks'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    action = db.Column(db.String(32), nullable=False)
    payload = db.Column(db.JSON, nullable=False)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id'), nullable=True)
    status = db.Column(db.String(16), nullable=False, default='pending', index=True)
    attempts = db.Column(db.Integer, nullable=False, default=0)
    last_error = db.Column(db.String(1000))
    external_id = db.Column(db.String(64))
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    processed_at = db.Column(db.DateTime)

    def to_dict(self):
        return {
            'id': self.id,
            'action': self.action,
            'payload': self.payload,
            'product_id': self.product_id,
            'status': self.status,
            'attempts': self.attempts,
            'last_error': self.last_error,
            'external_id': self.external_id,
            'created_at': _isoformat(self.created_at),
            'processed_at': _isoformat(self.processed_at),
        }


# --- 3. GALLERY / COMPETITION MODELS ---

class Competition(db.Model):
    __tablename__ = 'competitions'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    theme = db.Column(db.String(255))
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    prize_details = db.Column(db.Text)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'theme': self.theme,
            'start_date': _isoformat(self.start_date),
            'end_date': _isoformat(self.end_date),
            'prize_details': self.prize_details,
            'is_active': self.is_active,
            'created_at': _isoformat(self.created_at),
        }


class GallerySubmission(db.Model):
    __tablename__ = 'gallery_submissions'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False, index=True)
    title = db.Column(db.String(255))
    description = db.Column(db.Text)
    image_url = db.Column(db.String(1024), nullable=False)
    is_approved = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    owner = db.relationship('Profile', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'title': self.title,
            'description': self.description,
            'image_url': self.image_url,
            'is_approved': self.is_approved,
            'created_at': _isoformat(self.created_at),
            'owner_name': self.owner.full_name if self.owner else None,
        }


class CompetitionSubmission(db.Model):
    __tablename__ = 'competition_submissions'
    __table_args__ = (
        db.UniqueConstraint('competition_id', 'submission_id', name='uq_competition_submissions_entry'),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    competition_id = db.Column(db.String(36), db.ForeignKey('competitions.id'), nullable=False, index=True)
    submission_id = db.Column(db.String(36), db.ForeignKey('gallery_submissions.id'), nullable=False)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    gallery_submission = db.relationship('GallerySubmission', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'competition_id': self.competition_id,
            'submission_id': self.submission_id,
            'user_id': self.user_id,
            'created_at': _isoformat(self.created_at),
            'gallery_submission': self.gallery_submission.to_dict() if self.gallery_submission else None,
        }


class Vote(db.Model):
    __tablename__ = 'votes'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'submission_id', name='uq_votes_user_submission'),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False)
    submission_id = db.Column(db.String(36), db.ForeignKey('competition_submissions.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)


# --- 4. ORDER MODELS ---

class Order(db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default='pending')
    total_amount = db.Column(db.Float, nullable=False, default=0.0)
    shipping_address = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    order_items = db.relationship('OrderItem', backref='order', lazy=True, cascade="all, delete-orphan")
    profile = db.relationship('Profile', lazy='joined')

    def to_dict(self, include_items=True):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'status': self.status,
            'total_amount': self.total_amount,
            'shipping_address': self.shipping_address,
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
            'profile': self.profile.to_dict() if self.profile else None,
        }
        if include_items:
            data['order_items'] = [item.to_dict() for item in self.order_items]
        return data


class OrderItem(db.Model):
    """Line item with a denormalized snapshot of the variant at order time."""
    __tablename__ = 'order_items'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    order_id = db.Column(db.String(36), db.ForeignKey('orders.id'), nullable=False, index=True)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id'), nullable=True)
    image_url = db.Column(db.String(1024))
    size = db.Column(db.String(8))
    frame_type = db.Column(db.String(32))
    quantity = db.Column(db.Integer, nullable=False, default=1)
    price = db.Column(db.Float, nullable=False)

    product = db.relationship('Product', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'order_id': self.order_id,
            'product_id': self.product_id,
            'image_url': self.image_url,
            'size': self.size,
            'frame_type': self.frame_type,
            'quantity': self.quantity,
            'price': self.price,
            'product': self.product.to_dict() if self.product else None,
        }


# --- 5. COMMUNITY MODELS ---

class Event(db.Model):
    __tablename__ = 'events'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    event_date = db.Column(db.DateTime, nullable=False, index=True)
    location_name = db.Column(db.String(255))
    initiative_id = db.Column(db.String(36), db.ForeignKey('initiatives.id', use_alter=True,
                                                           name='fk_events_initiative_id'), nullable=True)
    is_approved = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    initiative = db.relationship('Initiative', foreign_keys=[initiative_id])

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'event_date': _isoformat(self.event_date),
            'location_name': self.location_name,
            'initiative_id': self.initiative_id,
            'is_approved': self.is_approved,
            'created_at': _isoformat(self.created_at),
        }


class Initiative(db.Model):
    __tablename__ = 'initiatives'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    organizer_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False)
    related_event_id = db.Column(db.String(36), db.ForeignKey('events.id'), nullable=True)
    status = db.Column(db.String(16), nullable=False, default='active', index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    organizer = db.relationship('Profile', lazy='joined')
    related_event = db.relationship('Event', foreign_keys=[related_event_id])

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'organizer_id': self.organizer_id,
            'related_event_id': self.related_event_id,
            'status': self.status,
            'created_at': _isoformat(self.created_at),
            'organizer': self.organizer.to_dict() if self.organizer else None,
            'event': self.related_event.to_dict() if self.related_event else None,
        }


class EventRSVP(db.Model):
    __tablename__ = 'event_rsvps'
    __table_args__ = (
        db.UniqueConstraint('event_id', 'user_id', name='uq_event_rsvps_event_user'),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    event_id = db.Column(db.String(36), db.ForeignKey('events.id'), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False)
    status = db.Column(db.String(16), nullable=False, default='attending')
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'event_id': self.event_id,
            'user_id': self.user_id,
            'status': self.status,
            'created_at': _isoformat(self.created_at),
        }


class CollageSubmission(db.Model):
    __tablename__ = 'collage_submissions'
    __table_args__ = (
        db.UniqueConstraint('initiative_id', 'user_id', name='uq_collage_submissions_initiative_user'),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    initiative_id = db.Column(db.String(36), db.ForeignKey('initiatives.id'), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False)
    image_url = db.Column(db.String(1024), nullable=False)
    description = db.Column(db.Text)
    is_approved = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    author = db.relationship('Profile', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'initiative_id': self.initiative_id,
            'user_id': self.user_id,
            'image_url': self.image_url,
            'description': self.description,
            'is_approved': self.is_approved,
            'created_at': _isoformat(self.created_at),
            'author_name': self.author.full_name if self.author else None,
        }
