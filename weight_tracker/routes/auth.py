import logging

from flask import Blueprint, request, jsonify
from flask_jwt_extended import set_access_cookies, unset_jwt_cookies

from weight_tracker.auth import create_session_token, current_user, current_username, login_required
from weight_tracker.models.user import MIN_PASSWORD_LENGTH, update_user, update_user_password, validate_user

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)

MAX_NICKNAME_LENGTH = 50


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')

    if not username or not password:
        return jsonify({'success': False, 'error': 'Username and password are required'}), 400

    user = validate_user(username, password)

    if not user:
        logger.warning('Failed login attempt for %s', username)
        return jsonify({'success': False, 'error': 'Invalid username or password'}), 401

    access_token = create_session_token(user)

    response = jsonify({
        'success': True,
        'data': user.to_session_dict(),
        'access_token': access_token,
    })
    set_access_cookies(response, access_token)
    return response


@auth_bp.route('/logout', methods=['POST'])
def logout():
    response = jsonify({'success': True, 'data': {'loggedOut': True}})
    unset_jwt_cookies(response)
    return response


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    user = current_user()
    if user is None:
        return jsonify({'success': False, 'error': 'Not authenticated'}), 401
    return jsonify({'success': True, 'data': user.to_session_dict()})


@auth_bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    data = request.get_json(silent=True) or {}
    current_password = data.get('currentPassword')
    new_password = data.get('newPassword')

    if not current_password or not new_password:
        return jsonify({
            'success': False,
            'error': 'Current password and new password are required',
        }), 400

    if not isinstance(new_password, str) or len(new_password) < MIN_PASSWORD_LENGTH:
        return jsonify({
            'success': False,
            'error': f'New password must be at least {MIN_PASSWORD_LENGTH} characters',
        }), 400

    update_user_password(current_username(), current_password, new_password)

    return jsonify({'success': True, 'data': {'message': 'Password changed successfully'}})


@auth_bp.route('/change-nickname', methods=['POST'])
@login_required
def change_nickname():
    data = request.get_json(silent=True) or {}
    nickname = data.get('nickname')

    if not nickname or not isinstance(nickname, str):
        return jsonify({'success': False, 'error': 'Nickname is required'}), 400

    nickname = nickname.strip()
    if not 1 <= len(nickname) <= MAX_NICKNAME_LENGTH:
        return jsonify({
            'success': False,
            'error': f'Nickname must be between 1 and {MAX_NICKNAME_LENGTH} characters',
        }), 400

    user = update_user(current_username(), nickname=nickname)

    # Re-issue the session so it carries the new nickname
    response = jsonify({'success': True, 'data': {'nickname': user.nickname}})
    set_access_cookies(response, create_session_token(user))
    return response
