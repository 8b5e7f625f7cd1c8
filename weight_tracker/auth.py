"""
Request authentication for the API blueprints.

A request is authenticated either by the session token issued at login
(cookie or `Authorization: Bearer <token>`) or, when `API_KEY` is configured,
by presenting that key in `X-API-Key` or `Authorization: Bearer <key>`.
API-key requests act as the `API_USER` account.
"""

import hmac
from functools import wraps

from flask import current_app, g, jsonify, request
from flask_jwt_extended import create_access_token, get_jwt_identity, verify_jwt_in_request

from weight_tracker.models.user import get_user_by_username


def _matches(candidate, api_key):
    return candidate is not None and hmac.compare_digest(candidate.encode(), api_key.encode())


def has_valid_api_key():
    api_key = current_app.config.get('API_KEY')
    if not api_key:
        return False

    # Check Authorization: Bearer <key>
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer ') and _matches(auth_header[7:], api_key):
        return True

    return _matches(request.headers.get('X-API-Key'), api_key)


def create_session_token(user):
    return create_access_token(
        identity=user.username,
        additional_claims={'nickname': user.nickname, 'role': user.role},
    )


def current_username():
    return g.username


def current_user():
    """The stored account behind this request, or None if it has been deleted."""
    return get_user_by_username(g.username)


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if has_valid_api_key():
            g.username = current_app.config['API_USER']
        else:
            verify_jwt_in_request()
            g.username = get_jwt_identity()
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    @login_required
    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = current_user()
        if user is None:
            return jsonify({'success': False, 'error': 'Not authenticated'}), 401
        if user.role != 'admin':
            return jsonify({'success': False, 'error': 'Admin access required'}), 403
        return fn(*args, **kwargs)
    return wrapper
