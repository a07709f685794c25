# app/api/admin.py
# (This file holds the admin order management routes.)

from flask import Blueprint, jsonify
from app.jwt_auth import require_jwt, admin_required
from app.utils import _handle_service_result, get_json_body
from app.services.orders import list_orders, set_order_status

bp = Blueprint('admin', __name__)


@bp.route('/admin/orders', methods=['GET'])
@require_jwt
@admin_required
def list_orders_route():
    """Returns all orders with line items and customer profile for the admin dashboard."""
    return _handle_service_result(list_orders())


@bp.route('/admin/orders/<string:order_id>/status', methods=['POST'])
@require_jwt
@admin_required
def update_order_status_route(order_id):
    """Updates the status of a specified order."""
    data = get_json_body()
    new_status = data.get('status')

    if not new_status:
        return jsonify({"success": False, "error": "Status missing in request body."}), 400

    result = set_order_status(order_id, new_status)
    return _handle_service_result(result)
