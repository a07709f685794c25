# app/services/variants.py
# Find-or-create for product variants keyed by (size, frame_type).

from flask import current_app
from sqlalchemy.exc import IntegrityError
from app import db
from app.models import Product
from app.services.catalog import find_size, find_frame, variant_price
from app.services.inventory_sync import enqueue_create_item, dispatch_after_response


class VariantError(Exception):
    def __init__(self, message, status_code=400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


def _lookup(size_id, frame_id):
    return Product.query.filter_by(size=size_id, frame_type=frame_id).first()


def resolve_variant(size_id, frame_id):
    """
    Returns (product, created) for the exact (size, frame) pair.

    A missing variant is inserted with base_price = size price + frame price
    together with an inventory outbox task. If a concurrent request wins the
    insert, the unique constraint fires; the row is re-read and returned with
    created=False, and no task is queued for the loser.

    The inventory push is scheduled for after the response has been sent
    and is best-effort: it cannot fail, delay or change the result.

    Raises:
        VariantError: Unknown size/frame (400) or database failure (500)
    """
    size = find_size(size_id)
    frame = find_frame(frame_id)
    if size is None:
        raise VariantError(f"Unknown size '{size_id}'.")
    if frame is None:
        raise VariantError(f"Unknown frame '{frame_id}'.")

    product = _lookup(size['id'], frame['id'])
    if product:
        return product, False

    try:
        product = Product(size=size['id'], frame_type=frame['id'], base_price=variant_price(size, frame))
        db.session.add(product)
        db.session.flush()
        task = enqueue_create_item(product, size, frame)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning(
            f"Variant {size['id']}/{frame['id']} was created concurrently. Re-reading."
        )
        product = _lookup(size['id'], frame['id'])
        if product is None:
            raise VariantError("Failed to create product configuration", 500)
        return product, False
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Product creation error: {str(e)}")
        raise VariantError("Failed to create product configuration", 500)

    current_app.logger.info(f"Created product variant {product.id} ({size['id']}/{frame['id']})")

    if current_app.config.get('INVENTORY_SYNC_INLINE', True):
        dispatch_after_response(task.id)

    return product, True
