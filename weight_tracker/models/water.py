from datetime import datetime

from weight_tracker.errors import ValidationError
from weight_tracker.extensions import store
from weight_tracker.storage.document_store import WATER
from weight_tracker.utils import generate_id, is_number, today_date, utc_now_iso


class WaterEntry:
    """Total water drunk on one calendar day, in ml."""

    def __init__(self, id, author, date, amount=0, updated_at=None):
        self.id = id
        self.author = author
        self.date = date
        self.amount = amount
        self.updated_at = updated_at or utc_now_iso()

    @classmethod
    def from_dict(cls, data, owner):
        return cls(
            id=data.get('id'),
            author=data.get('author') or owner,
            date=data.get('date'),
            amount=data.get('amount') or 0,
            updated_at=data.get('updatedAt'),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'author': self.author,
            'date': self.date,
            'amount': self.amount,
            'updatedAt': self.updated_at,
        }


def _validate_date(value):
    try:
        parsed = datetime.strptime(value, '%Y-%m-%d')
    except (TypeError, ValueError):
        raise ValidationError('Date must be in YYYY-MM-DD format')
    # strptime accepts unpadded fields like 2024-1-5
    if parsed.strftime('%Y-%m-%d') != value:
        raise ValidationError('Date must be in YYYY-MM-DD format')


def _save_water_entries(user_id, entries):
    store.put(WATER, user_id, [entry.to_dict() for entry in entries])


def get_water_entries(user_id):
    store.prepare(WATER, user_id)
    data = store.get(WATER, user_id) or []
    return [WaterEntry.from_dict(item, user_id) for item in data]


def get_water_entry(user_id, date):
    return next((e for e in get_water_entries(user_id) if e.date == date), None)


def get_today_water(user_id):
    return get_water_entry(user_id, today_date())


def _upsert(user_id, date, update_amount):
    """Apply `update_amount` to the amount stored for `date`, creating the entry at 0 if absent."""
    with store.locked(WATER, user_id):
        entries = get_water_entries(user_id)
        entry = next((e for e in entries if e.date == date), None)

        if entry is None:
            entry = WaterEntry(
                id=generate_id('water-', existing={e.id for e in entries}),
                author=user_id,
                date=date,
            )
            entries.append(entry)

        entry.amount = update_amount(entry.amount)
        entry.updated_at = utc_now_iso()
        _save_water_entries(user_id, entries)

    return entry


def add_water(user_id, amount):
    """Add `amount` ml to today's total."""
    if not is_number(amount) or amount <= 0:
        raise ValidationError('Amount must be a positive number')
    return _upsert(user_id, today_date(), lambda current: current + amount)


def reset_today_water(user_id):
    return _upsert(user_id, today_date(), lambda current: 0)


def set_water_amount(user_id, date, amount):
    """Set the total for any date; this is how past days are edited."""
    if not is_number(amount) or amount < 0:
        raise ValidationError('Amount must be a non-negative number')
    _validate_date(date)
    return _upsert(user_id, date, lambda current: amount)
