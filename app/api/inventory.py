# app/api/inventory.py
# (Inventory proxy route: {action, data} -> {success, data?, error?}.)

from flask import Blueprint, jsonify
from app.jwt_auth import require_jwt
from app.utils import _handle_service_result, get_json_body
from app.services.inventory import handle_proxy_request

bp = Blueprint('inventory', __name__)


@bp.route('/inventory', methods=['POST'])
@require_jwt
def inventory_proxy_route():
    """
    Proxies createItem / createSalesOrder to the inventory provider.
    Credentials stay on the server; any failure is a 400.
    """
    payload = get_json_body()
    if not payload.get('action'):
        return jsonify({"success": False, "error": "Missing action in request body."}), 400

    return _handle_service_result(handle_proxy_request(payload), default_error_status=400)
