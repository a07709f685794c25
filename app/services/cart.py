# app/services/cart.py
# Cart services: one cart per user, one new line per add, count = sum of quantities.

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from app import db
from app.models import Cart, CartItem
from app.services.catalog import find_size, find_frame, variant_price
from app.services.variants import resolve_variant, VariantError


def get_or_create_cart(user_id):
    """
    Returns the user's cart, creating it on first use.
    carts.user_id is unique, so a concurrent creation surfaces as an
    IntegrityError; the winner's row is re-read.
    """
    cart = Cart.query.filter_by(user_id=user_id).first()
    if cart:
        return cart

    try:
        cart = Cart(user_id=user_id)
        db.session.add(cart)
        db.session.commit()
        current_app.logger.info(f"Created cart {cart.id} for user {user_id}")
        return cart
    except IntegrityError:
        db.session.rollback()
        cart = Cart.query.filter_by(user_id=user_id).first()
        if cart is None:
            raise
        return cart


def add_item(user_id, variant_id, image_url, price):
    """
    Appends a new line (quantity 1) to the user's cart. Lines are never
    merged, adding the same variant twice gives two lines.
    """
    cart = get_or_create_cart(user_id)

    item = CartItem(
        cart_id=cart.id,
        product_id=variant_id,
        image_url=image_url,
        price=price,
        quantity=1,
    )
    db.session.add(item)
    db.session.commit()
    return item


def count_items(user_id):
    """Sum of line quantities (missing quantity counts as 1); 0 without a cart."""
    cart_id = db.session.query(Cart.id).filter_by(user_id=user_id).scalar()
    if cart_id is None:
        return 0

    total = db.session.query(
        func.coalesce(func.sum(func.coalesce(CartItem.quantity, 1)), 0)
    ).filter(CartItem.cart_id == cart_id).scalar()
    return int(total or 0)


def get_item_count(user):
    """
    Item count for the caller. Anonymous callers get 0 without touching the
    database; any failure is logged and the count resets to 0.
    """
    if user is None:
        return 0

    try:
        return count_items(user.id)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error fetching cart count for {user.id}: {str(e)}")
        return 0


def get_cart(user):
    if user is None:
        return {"success": True, "data": {"items": [], "item_count": 0, "total": 0.0}}

    try:
        cart = Cart.query.filter_by(user_id=user.id).first()
        items = cart.items if cart else []
        return {
            "success": True,
            "data": {
                "cart_id": cart.id if cart else None,
                "items": [item.to_dict() for item in items],
                "item_count": sum((item.quantity or 1) for item in items),
                "total": round(sum(item.price * (item.quantity or 1) for item in items), 2),
            }
        }
    except Exception as e:
        return {"success": False, "error": f"Database error fetching cart: {str(e)}"}, 500


def add_kit_to_cart(user, size_id, frame_id, image_url):
    """
    Add-to-cart for the kit builder: resolves the (size, frame) variant,
    prices the line from the catalog and appends it to the caller's cart.
    """
    if not image_url:
        return {"success": False, "error": "Please upload an image before adding to cart."}, 400

    size = find_size(size_id)
    frame = find_frame(frame_id)
    if size is None or frame is None:
        return {"success": False, "error": "Invalid size or frame selection."}, 400

    try:
        product, created = resolve_variant(size['id'], frame['id'])
    except VariantError as e:
        return {"success": False, "error": e.message}, e.status_code

    try:
        item = add_item(user.id, product.id, image_url, variant_price(size, frame))
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding to cart for {user.id}: {str(e)}")
        return {"success": False, "error": "An error occurred while adding to cart"}, 500

    return {
        "success": True,
        "data": {
            "item": item.to_dict(),
            "variant_created": created,
            "item_count": get_item_count(user),
        }
    }
