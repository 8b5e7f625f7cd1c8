from flask import Blueprint, request, jsonify

from weight_tracker.auth import current_username, login_required
from weight_tracker.models.settings import get_settings, update_settings

settings_bp = Blueprint('settings', __name__)


@settings_bp.route('', methods=['GET'])
@login_required
def read_settings():
    settings = get_settings(current_username())
    return jsonify({'success': True, 'data': settings.to_dict()})


@settings_bp.route('', methods=['PUT'])
@login_required
def write_settings():
    data = request.get_json(silent=True) or {}
    settings = update_settings(data, current_username())
    return jsonify({'success': True, 'data': settings.to_dict()})
