# app/api/cart.py
# (Cart routes, including the live item count stream.)

import json
from flask import Blueprint, Response, jsonify, g, current_app, stream_with_context
from app import db
from app.jwt_auth import require_jwt, optional_jwt
from app.utils import _handle_service_result, get_json_body
from app.services.cart import get_cart, get_item_count, add_kit_to_cart
from app.services.realtime import change_feed

bp = Blueprint('cart', __name__)


@bp.route('/cart', methods=['GET'])
@optional_jwt
def get_cart_route():
    return _handle_service_result(get_cart(g.current_user))


@bp.route('/cart/count', methods=['GET'])
@optional_jwt
def get_cart_count_route():
    """Item count for the caller; anonymous callers always get 0."""
    return jsonify({"success": True, "item_count": get_item_count(g.current_user)}), 200


@bp.route('/cart/items', methods=['POST'])
@require_jwt
def add_cart_item_route():
    """
    Adds a kit to the caller's cart.
    Body: {"size": "A3", "frame": "none", "image_url": "..."}
    The price is taken from the catalog, not from the client.
    """
    data = get_json_body()
    if not data.get('size') or not data.get('frame'):
        return jsonify({"success": False, "error": "Missing size or frame selection."}), 400

    result = add_kit_to_cart(g.current_user, data['size'], data['frame'], data.get('image_url'))
    return _handle_service_result(result)


def _sse(payload):
    return f"data: {json.dumps(payload)}\n\n"


@bp.route('/cart/count/stream', methods=['GET'])
@optional_jwt
def cart_count_stream_route():
    """
    Server-Sent Events stream of the caller's item count.

    Any change to cart_items triggers a recompute of this caller's own
    count; bursts are coalesced into one recompute. The subscription is
    cancelled when the client goes away.
    """
    user = g.current_user
    heartbeat = current_app.config.get('CART_STREAM_HEARTBEAT', 25)

    def generate():
        stream = change_feed.watch('cart_items') if user is not None else None
        try:
            last_count = get_item_count(user)
            db.session.rollback()
            yield _sse({"item_count": last_count})

            if stream is None:
                return

            while True:
                if not stream.wait(timeout=heartbeat):
                    yield ": keep-alive\n\n"
                    continue

                count = get_item_count(user)
                db.session.rollback()
                if count != last_count:
                    last_count = count
                    yield _sse({"item_count": count})
        finally:
            if stream is not None:
                stream.close()

    return Response(
        stream_with_context(generate()),
        mimetype='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'},
    )
