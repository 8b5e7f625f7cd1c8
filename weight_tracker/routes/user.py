from flask import Blueprint, request, jsonify

from weight_tracker.auth import admin_required, current_username
from weight_tracker.models.user import (
    ROLES,
    create_user,
    delete_user,
    get_user_by_username,
    get_users_without_passwords,
    update_user,
)

user_bp = Blueprint('user', __name__)


@user_bp.route('', methods=['GET'])
@admin_required
def list_users():
    return jsonify({'success': True, 'data': get_users_without_passwords()})


@user_bp.route('', methods=['POST'])
@admin_required
def add_user():
    data = request.get_json(silent=True) or {}

    if not data.get('username') or not data.get('password'):
        return jsonify({'success': False, 'error': 'Username and password are required'}), 400

    user = create_user({
        'username': data['username'],
        'password': data['password'],
        'nickname': data.get('nickname') or data['username'],
        'role': data.get('role') or 'user',
    })

    return jsonify({'success': True, 'data': user.to_dict(include_password=False)}), 201


@user_bp.route('/<username>', methods=['GET'])
@admin_required
def get_user(username):
    user = get_user_by_username(username)
    if user is None:
        return jsonify({'success': False, 'error': 'User not found'}), 404
    return jsonify({'success': True, 'data': user.to_session_dict()})


@user_bp.route('/<username>', methods=['PATCH'])
@admin_required
def edit_user(username):
    data = request.get_json(silent=True) or {}
    nickname = data.get('nickname')
    role = data.get('role')

    # Prevent admin from changing their own role
    if username == current_username() and role and role != 'admin':
        return jsonify({'success': False, 'error': 'You cannot change your own role'}), 400

    if role and role not in ROLES:
        return jsonify({'success': False, 'error': 'Invalid role. Must be "admin" or "user"'}), 400

    user = update_user(username, nickname=nickname, role=role or None)

    return jsonify({'success': True, 'data': user.to_dict(include_password=False)})


@user_bp.route('/<username>', methods=['DELETE'])
@admin_required
def remove_user(username):
    # Prevent admin from deleting themselves
    if username == current_username():
        return jsonify({'success': False, 'error': 'You cannot delete your own account'}), 400

    delete_user(username)

    return jsonify({'success': True, 'data': {'message': 'User deleted successfully'}})
