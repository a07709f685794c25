# app/api/competitions.py
# (Competition, gallery and voting routes.)

from flask import Blueprint, g
from app.jwt_auth import require_jwt, optional_jwt
from app.utils import _handle_service_result, get_json_body
from app.services.competitions import (
    list_competitions,
    get_competition_board,
    list_gallery,
    list_eligible_gallery,
    submit_to_competition,
    cast_vote
)

bp = Blueprint('competitions', __name__)


@bp.route('/competitions', methods=['GET'])
def list_competitions_route():
    """Competitions newest first, each with its derived status."""
    return _handle_service_result(list_competitions())


@bp.route('/competitions/<string:competition_id>', methods=['GET'])
@optional_jwt
def competition_board_route(competition_id):
    """Entries with vote counts; user_voted is filled in for signed-in callers."""
    result = get_competition_board(competition_id, g.current_user)
    return _handle_service_result(result, default_error_status=404)


@bp.route('/competitions/<string:competition_id>/submissions', methods=['POST'])
@require_jwt
def submit_entry_route(competition_id):
    data = get_json_body()
    result = submit_to_competition(g.current_user, competition_id, data.get('submission_id'))
    return _handle_service_result(result)


@bp.route('/competition-submissions/<string:submission_id>/votes', methods=['POST'])
@require_jwt
def vote_route(submission_id):
    return _handle_service_result(cast_vote(g.current_user, submission_id))


@bp.route('/gallery', methods=['GET'])
def gallery_route():
    return _handle_service_result(list_gallery())


@bp.route('/gallery/mine', methods=['GET'])
@require_jwt
def my_gallery_route():
    """Approved pieces the caller can enter into a competition."""
    return _handle_service_result(list_eligible_gallery(g.current_user.id))
