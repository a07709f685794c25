# auth.py

from flask import Blueprint, jsonify, g, current_app
from app.jwt_auth import require_jwt, load_admin_flag

# Define the Blueprint
bp = Blueprint('auth', __name__)


@bp.route('/me', methods=['GET'])
@require_jwt
def get_current_user():
    """
    Returns the caller's identity and capabilities.

    The SPA reads is_admin from here instead of querying admin_users
    itself; screens declare what they need (current user, admin) and take
    it from this response.

    Response:
        200: User details with authentication status
        401: Invalid or missing token
    """
    user = g.current_user

    try:
        is_admin = load_admin_flag(user)
    except Exception as e:
        current_app.logger.error(f"Admin lookup failed for {user.id}: {str(e)}")
        is_admin = False

    return jsonify({
        "is_authenticated": True,
        "user_id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "is_admin": is_admin,
    }), 200


# NOTE FOR DEVELOPERS:
# Sign-up, sign-in and sign-out are handled entirely by Supabase on the frontend.
# The frontend sends the Supabase access token in the Authorization header and
# the backend verifies it with the require_jwt decorator.
