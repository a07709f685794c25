"""
JWT Authentication Middleware for Supabase Integration

This module verifies Supabase-issued access tokens and exposes the caller
to route handlers as an explicit auth context on flask.g.current_user.

Capabilities are declared per route:
    @require_jwt      -> authenticated user required
    @optional_jwt     -> g.current_user is None for anonymous callers
    @admin_required   -> admin role, checked against the admin_users table
"""

import jwt
from functools import wraps
from dataclasses import dataclass
from flask import request, jsonify, g, current_app
from app import db
from app.models import AdminUser
from app.services.jit_provisioning import ensure_profile_synced, JITProvisioningError


class JWTAuthError(Exception):
    """Custom exception for JWT authentication errors"""
    def __init__(self, message, status_code=401):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


@dataclass
class UserContext:
    """
    Lightweight user context extracted from the JWT token.

    All identity fields come from the verified token's claims. is_admin is
    only resolved by admin_required (or load_admin_flag); it stays False
    until a route asks for it.
    """
    id: str          # From JWT 'sub' claim (Supabase UUID)
    email: str       # From JWT 'email' claim
    full_name: str   # From JWT 'user_metadata.full_name' claim
    is_admin: bool = False


def extract_token_from_header():
    """
    Extracts the JWT token from the Authorization header.

    Expected format: "Authorization: Bearer <token>"

    Returns:
        str: The JWT token, or None when the header is absent

    Raises:
        JWTAuthError: If the Authorization header is malformed
    """
    auth_header = request.headers.get('Authorization')

    if not auth_header:
        return None

    parts = auth_header.split()

    if len(parts) != 2 or parts[0].lower() != 'bearer':
        raise JWTAuthError("Invalid Authorization header format. Expected 'Bearer <token>'", 401)

    return parts[1]


def verify_supabase_token(token):
    """
    Verifies a Supabase JWT token and extracts user claims.

    Raises:
        JWTAuthError: If token is invalid, expired, or verification fails
    """
    jwt_secret = current_app.config.get('SUPABASE_JWT_SECRET')

    if not jwt_secret:
        raise JWTAuthError("SUPABASE_JWT_SECRET not configured", 500)

    try:
        payload = jwt.decode(
            token,
            jwt_secret,
            algorithms=['HS256'],
            audience='authenticated',  # Supabase default audience
            options={
                'verify_exp': True,
                'verify_aud': True,
            }
        )

        return payload

    except jwt.ExpiredSignatureError:
        raise JWTAuthError("Token has expired", 401)
    except jwt.InvalidAudienceError:
        raise JWTAuthError("Invalid token audience", 401)
    except jwt.InvalidTokenError as e:
        raise JWTAuthError(f"Invalid token: {str(e)}", 401)


def create_user_context_from_token(payload):
    """
    Creates a UserContext from the JWT payload and makes sure the caller's
    profile row exists (orders, carts and submissions reference it).

    Raises:
        JWTAuthError: If required claims are missing or provisioning fails
    """
    user_id = payload.get('sub')
    email = payload.get('email')
    user_metadata = payload.get('user_metadata') or {}
    full_name = user_metadata.get('full_name')

    if not user_id:
        raise JWTAuthError("Token missing 'sub' claim", 401)

    if not email:
        raise JWTAuthError("Token missing 'email' claim", 401)

    if not full_name:
        full_name = email.split('@')[0]

    try:
        ensure_profile_synced(user_id=user_id, email=email, full_name=full_name)
    except JITProvisioningError as e:
        current_app.logger.error(
            f"Authentication failed for {email} ({user_id}): "
            f"profile provisioning error: {e.message}"
        )
        raise JWTAuthError("User provisioning failed. Please contact support.", 401)

    return UserContext(id=user_id, email=email, full_name=full_name)


def _authenticate(required):
    token = extract_token_from_header()

    if token is None:
        if required:
            raise JWTAuthError("Missing Authorization header", 401)
        g.current_user = None
        g.is_authenticated = False
        return

    payload = verify_supabase_token(token)
    g.current_user = create_user_context_from_token(payload)
    g.is_authenticated = True


def _auth_decorator(f, required):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            _authenticate(required)
        except JWTAuthError as e:
            return jsonify({"message": e.message}), e.status_code
        except Exception as e:
            current_app.logger.error(f"Unexpected error during authentication: {str(e)}")
            return jsonify({"message": "Authentication failed"}), 500

        return f(*args, **kwargs)

    return decorated_function


def require_jwt(f):
    """
    Decorator to protect routes with JWT authentication.

    Usage:
        @bp.route('/protected')
        @require_jwt
        def protected_route():
            user = g.current_user
            return jsonify({"message": f"Hello {user.full_name}"})

    Error Responses:
        401: Missing, invalid, or expired token
        500: Server error during authentication
    """
    return _auth_decorator(f, required=True)


def optional_jwt(f):
    """
    Like require_jwt, but anonymous callers are let through with
    g.current_user set to None. A token that is present but invalid is
    still rejected with 401.
    """
    return _auth_decorator(f, required=False)


def load_admin_flag(user):
    """Resolves the admin role for user from the admin_users table."""
    if user is None:
        return False
    admin_row = db.session.query(AdminUser.id).filter_by(user_id=user.id).first()
    user.is_admin = admin_row is not None
    return user.is_admin


def admin_required(f):
    """
    Decorator to require the admin role for route access.

    The role is not trusted from the token: it is looked up in admin_users
    keyed by the caller's id. Non-admins are denied before any data is read.

    Must be used AFTER @require_jwt decorator.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = getattr(g, 'current_user', None)

        if not user:
            return jsonify({"message": "Authentication required."}), 401

        try:
            is_admin = load_admin_flag(user)
        except Exception as e:
            current_app.logger.error(f"Admin lookup failed for {user.id}: {str(e)}")
            return jsonify({"message": "Could not verify admin access."}), 500

        if not is_admin:
            return jsonify({"message": "Permission denied: Admin access required."}), 403

        return f(*args, **kwargs)

    return decorated_function
