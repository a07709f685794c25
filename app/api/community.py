# app/api/community.py
# (Initiative, event and RSVP routes.)

from flask import Blueprint, jsonify, g
from app.jwt_auth import require_jwt, optional_jwt
from app.utils import _handle_service_result, get_json_body
from app.services.community import (
    list_initiatives,
    get_initiative,
    list_events,
    set_rsvp,
    submit_collage
)

bp = Blueprint('community', __name__)


@bp.route('/initiatives', methods=['GET'])
def list_initiatives_route():
    return _handle_service_result(list_initiatives())


@bp.route('/initiatives/<string:initiative_id>', methods=['GET'])
@optional_jwt
def initiative_detail_route(initiative_id):
    result = get_initiative(initiative_id, g.current_user)
    return _handle_service_result(result, default_error_status=404)


@bp.route('/initiatives/<string:initiative_id>/collages', methods=['POST'])
@require_jwt
def submit_collage_route(initiative_id):
    data = get_json_body()
    result = submit_collage(g.current_user, initiative_id, data.get('image_url'), data.get('description'))
    return _handle_service_result(result)


@bp.route('/events', methods=['GET'])
def list_events_route():
    """Upcoming approved events."""
    return _handle_service_result(list_events())


@bp.route('/events/<string:event_id>/rsvp', methods=['POST'])
@require_jwt
def rsvp_route(event_id):
    data = get_json_body()
    status = data.get('status')

    if not status:
        return jsonify({"success": False, "error": "RSVP status missing in request body."}), 400

    return _handle_service_result(set_rsvp(g.current_user, event_id, status))
