# app/api/catalog.py
# (Catalog, image upload and health routes.)

from flask import Blueprint, request, jsonify, g, current_app
from sqlalchemy import text
from app import db
from app.jwt_auth import require_jwt
from app.utils import _handle_service_result, get_json_body
from app.services.catalog import get_catalog
from app.services.storage import upload_image, delete_image

bp = Blueprint('catalog', __name__)


@bp.route('/health', methods=['GET'])
def health_route():
    """Liveness plus a trivial database round trip."""
    try:
        db.session.execute(text('SELECT 1'))
        database = 'connected'
    except Exception as e:
        current_app.logger.error(f"Health check database error: {str(e)}")
        database = 'disconnected'

    status_code = 200 if database == 'connected' else 503
    return jsonify({"status": "ok" if status_code == 200 else "degraded", "database": database}), status_code


@bp.route('/catalog', methods=['GET'])
def catalog_route():
    """Returns the print sizes and frames offered by the kit builder."""
    return _handle_service_result(get_catalog())


@bp.route('/uploads', methods=['POST'])
@require_jwt
def upload_route():
    """
    Multipart upload: 'file' plus optional 'size' (the selected print size)
    used to produce a quality warning.
    """
    if 'file' not in request.files:
        return jsonify({"success": False, "error": "No file part in the request", "field": "file"}), 400
    file = request.files['file']
    if file.filename == '':
        return jsonify({"success": False, "error": "No file selected", "field": "file"}), 400

    result = upload_image(
        g.current_user.id,
        file.mimetype,
        file.read(),
        size_id=request.form.get('size'),
    )
    return _handle_service_result(result)


@bp.route('/uploads', methods=['DELETE'])
@require_jwt
def delete_upload_route():
    data = get_json_body()
    result = delete_image(g.current_user.id, data.get('path'))
    return _handle_service_result(result)
