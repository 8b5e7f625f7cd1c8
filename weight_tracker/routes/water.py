from flask import Blueprint, request, jsonify

from weight_tracker.auth import current_username, login_required
from weight_tracker.models.water import (
    add_water,
    get_today_water,
    get_water_entries,
    get_water_entry,
    reset_today_water,
    set_water_amount,
)

water_bp = Blueprint('water', __name__)


@water_bp.route('', methods=['GET'])
@login_required
def read_water():
    user_id = current_username()
    date = request.args.get('date')

    if request.args.get('all') == 'true':
        data = [entry.to_dict() for entry in get_water_entries(user_id)]
    else:
        entry = get_water_entry(user_id, date) if date else get_today_water(user_id)
        data = entry.to_dict() if entry else None

    return jsonify({'success': True, 'data': data})


@water_bp.route('', methods=['POST'])
@login_required
def add_to_today():
    data = request.get_json(silent=True) or {}
    entry = add_water(current_username(), data.get('amount'))
    return jsonify({'success': True, 'data': entry.to_dict()})


@water_bp.route('', methods=['DELETE'])
@login_required
def reset_today():
    entry = reset_today_water(current_username())
    return jsonify({'success': True, 'data': entry.to_dict()})


@water_bp.route('', methods=['PATCH'])
@login_required
def set_for_date():
    data = request.get_json(silent=True) or {}
    date = data.get('date')

    if not date or not isinstance(date, str):
        return jsonify({'success': False, 'error': 'Date is required'}), 400

    entry = set_water_amount(current_username(), date, data.get('amount'))
    return jsonify({'success': True, 'data': entry.to_dict()})
