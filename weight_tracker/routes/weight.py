from flask import Blueprint, request, jsonify

from weight_tracker.auth import current_username, login_required
from weight_tracker.models.weight import add_entry, delete_entry, get_entries, update_entry

weight_bp = Blueprint('weight', __name__)


@weight_bp.route('', methods=['GET'])
@login_required
def list_entries():
    entries = get_entries(current_username())
    return jsonify({'success': True, 'data': [entry.to_dict() for entry in entries]})


@weight_bp.route('', methods=['POST'])
@login_required
def create_entry():
    data = request.get_json(silent=True) or {}

    entry = add_entry(data, current_username())

    return jsonify({'success': True, 'data': entry.to_dict()}), 201


@weight_bp.route('/<entry_id>', methods=['PATCH'])
@login_required
def edit_entry(entry_id):
    data = request.get_json(silent=True) or {}

    entry = update_entry(entry_id, data, current_username())

    if entry is None:
        return jsonify({'success': False, 'error': 'Entry not found'}), 404

    return jsonify({'success': True, 'data': entry.to_dict()})


@weight_bp.route('/<entry_id>', methods=['DELETE'])
@login_required
def remove_entry(entry_id):
    if not delete_entry(entry_id, current_username()):
        return jsonify({'success': False, 'error': 'Entry not found'}), 404

    return jsonify({'success': True, 'data': {'deleted': True}})
