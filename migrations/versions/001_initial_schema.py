"""Initial schema: profiles, catalog, carts, competitions, orders and community tables

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column('id', sa.String(length=36), nullable=False)


def _created_at():
    return sa.Column('created_at', sa.DateTime(), nullable=False)


def upgrade():
    """
    Creates every application table.

    Constraints that the services rely on live here:
    - products (size, frame_type): one variant per pair
    - carts (user_id): one cart per user
    - cart_items quantity >= 1
    - competition_submissions (competition_id, submission_id)
    - votes (user_id, submission_id)
    - event_rsvps (event_id, user_id)
    - collage_submissions (initiative_id, user_id)

    events.initiative_id and initiatives.related_event_id reference each
    other, so the events -> initiatives key is added after both tables exist.
    """
    op.create_table(
        'profiles',
        _id(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'])

    op.create_table(
        'admin_users',
        _id(),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'products',
        _id(),
        sa.Column('size', sa.String(length=8), nullable=False),
        sa.Column('frame_type', sa.String(length=32), nullable=False),
        sa.Column('base_price', sa.Float(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('size', 'frame_type', name='uq_products_size_frame'),
    )

    op.create_table(
        'carts',
        _id(),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'cart_items',
        _id(),
        sa.Column('cart_id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['cart_id'], ['carts.id']),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('quantity >= 1', name='ck_cart_items_quantity_positive'),
    )
    op.create_index('ix_cart_items_cart_id', 'cart_items', ['cart_id'])

    op.create_table(
        'inventory_sync_tasks',
        _id(),
        sa.Column('action', sa.String(length=32), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.Column('last_error', sa.String(length=1000), nullable=True),
        sa.Column('external_id', sa.String(length=64), nullable=True),
        _created_at(),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_inventory_sync_tasks_status', 'inventory_sync_tasks', ['status'])

    op.create_table(
        'competitions',
        _id(),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('theme', sa.String(length=255), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('prize_details', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'gallery_submissions',
        _id(),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=1024), nullable=False),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_gallery_submissions_user_id', 'gallery_submissions', ['user_id'])

    op.create_table(
        'competition_submissions',
        _id(),
        sa.Column('competition_id', sa.String(length=36), nullable=False),
        sa.Column('submission_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['competition_id'], ['competitions.id']),
        sa.ForeignKeyConstraint(['submission_id'], ['gallery_submissions.id']),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('competition_id', 'submission_id', name='uq_competition_submissions_entry'),
    )
    op.create_index('ix_competition_submissions_competition_id', 'competition_submissions', ['competition_id'])

    op.create_table(
        'votes',
        _id(),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('submission_id', sa.String(length=36), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['submission_id'], ['competition_submissions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'submission_id', name='uq_votes_user_submission'),
    )
    op.create_index('ix_votes_submission_id', 'votes', ['submission_id'])

    op.create_table(
        'orders',
        _id(),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('total_amount', sa.Float(), nullable=False),
        sa.Column('shipping_address', sa.JSON(), nullable=True),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])

    op.create_table(
        'order_items',
        _id(),
        sa.Column('order_id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=True),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('size', sa.String(length=8), nullable=True),
        sa.Column('frame_type', sa.String(length=32), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'events',
        _id(),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('event_date', sa.DateTime(), nullable=False),
        sa.Column('location_name', sa.String(length=255), nullable=True),
        sa.Column('initiative_id', sa.String(length=36), nullable=True),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_events_event_date', 'events', ['event_date'])

    op.create_table(
        'initiatives',
        _id(),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('organizer_id', sa.String(length=36), nullable=False),
        sa.Column('related_event_id', sa.String(length=36), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['organizer_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['related_event_id'], ['events.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_initiatives_status', 'initiatives', ['status'])

    with op.batch_alter_table('events', schema=None) as batch_op:
        batch_op.create_foreign_key('fk_events_initiative_id', 'initiatives', ['initiative_id'], ['id'])

    op.create_table(
        'event_rsvps',
        _id(),
        sa.Column('event_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id']),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_rsvps_event_user'),
    )
    op.create_index('ix_event_rsvps_event_id', 'event_rsvps', ['event_id'])

    op.create_table(
        'collage_submissions',
        _id(),
        sa.Column('initiative_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('image_url', sa.String(length=1024), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['initiative_id'], ['initiatives.id']),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('initiative_id', 'user_id', name='uq_collage_submissions_initiative_user'),
    )
    op.create_index('ix_collage_submissions_initiative_id', 'collage_submissions', ['initiative_id'])


def downgrade():
    """Drops every application table. All data is lost."""
    op.drop_table('collage_submissions')
    op.drop_table('event_rsvps')

    with op.batch_alter_table('events', schema=None) as batch_op:
        batch_op.drop_constraint('fk_events_initiative_id', type_='foreignkey')

    op.drop_table('initiatives')
    op.drop_table('events')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('votes')
    op.drop_table('competition_submissions')
    op.drop_table('gallery_submissions')
    op.drop_table('competitions')
    op.drop_table('inventory_sync_tasks')
    op.drop_table('cart_items')
    op.drop_table('carts')
    op.drop_table('products')
    op.drop_table('admin_users')
    op.drop_table('profiles')
