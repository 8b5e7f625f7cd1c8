from datetime import datetime, timezone

from weight_tracker.errors import ValidationError
from weight_tracker.extensions import store
from weight_tracker.storage.document_store import ENTRIES
from weight_tracker.utils import generate_id, is_number, parse_timestamp, utc_now_iso

SLEEP_QUALITY = {
    0: 'Good',
    1: 'Fair',
    2: 'Poor',
}

# Entries written before custom activities stored training as 0/1/2
LEGACY_TRAINING_IDS = {
    0: 'rest',
    1: 'weights',
    2: 'cardio',
}

MUTABLE_FIELDS = ('weight', 'training', 'sleep', 'timestamp')

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class WeightEntry:
    def __init__(self, id, author, weight, training, sleep, timestamp):
        self.id = id
        self.author = author
        self.weight = weight
        self.training = training
        self.sleep = sleep
        self.timestamp = timestamp

    @classmethod
    def from_dict(cls, data, owner):
        training = data.get('training')
        if is_number(training) and training in LEGACY_TRAINING_IDS:
            training = LEGACY_TRAINING_IDS[training]

        return cls(
            id=data.get('id'),
            author=data.get('author') or owner,
            weight=data.get('weight'),
            training=training,
            sleep=data.get('sleep'),
            timestamp=data.get('timestamp'),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'author': self.author,
            'weight': self.weight,
            'training': self.training,
            'sleep': self.sleep,
            'timestamp': self.timestamp,
        }

    @property
    def recorded_at(self):
        try:
            return parse_timestamp(self.timestamp)
        except ValueError:
            return _OLDEST


def validate_entry_fields(data, partial=False):
    """
    Check weight entry fields and return the ones that were provided.

    With partial=False weight, training and sleep are required.
    """
    if not isinstance(data, dict):
        raise ValidationError('Entry must be an object')

    fields = {key: data[key] for key in MUTABLE_FIELDS if key in data}

    if not partial:
        for key in ('weight', 'training', 'sleep'):
            if key not in fields:
                raise ValidationError(f'Missing {key} value')

    if 'weight' in fields and (not is_number(fields['weight']) or fields['weight'] <= 0):
        raise ValidationError('Invalid weight value')

    if 'training' in fields and (not isinstance(fields['training'], str) or not fields['training'].strip()):
        raise ValidationError('Invalid training value')

    if 'sleep' in fields and (not is_number(fields['sleep']) or fields['sleep'] not in SLEEP_QUALITY):
        raise ValidationError('Invalid sleep value')

    if fields.get('timestamp') is not None:
        try:
            parse_timestamp(fields['timestamp'])
        except ValueError:
            raise ValidationError('Invalid timestamp value')

    return fields


def _save_entries(user_id, entries):
    store.put(ENTRIES, user_id, [entry.to_dict() for entry in entries])


def get_entries(user_id):
    """All entries for the user, newest first. A missing file means no entries."""
    store.prepare(ENTRIES, user_id)

    data = store.get(ENTRIES, user_id) or []
    entries = [WeightEntry.from_dict(item, user_id) for item in data]
    # Sort by timestamp descending (newest first)
    return sorted(entries, key=lambda entry: entry.recorded_at, reverse=True)


def add_entry(data, user_id):
    fields = validate_entry_fields(data)

    with store.locked(ENTRIES, user_id):
        entries = get_entries(user_id)

        entry = WeightEntry(
            id=generate_id(existing={e.id for e in entries}),
            author=user_id,
            weight=fields['weight'],
            training=fields['training'],
            sleep=fields['sleep'],
            timestamp=fields.get('timestamp') or utc_now_iso(),
        )
        entries.append(entry)
        _save_entries(user_id, entries)

    return entry


def update_entry(entry_id, data, user_id):
    """Merge `data` into the entry with `entry_id`. Returns None if there is no such entry."""
    fields = validate_entry_fields(data, partial=True)

    with store.locked(ENTRIES, user_id):
        entries = get_entries(user_id)
        entry = next((e for e in entries if e.id == entry_id), None)

        if entry is None:
            return None

        for key, value in fields.items():
            if key == 'timestamp' and value is None:
                continue
            setattr(entry, key, value)

        _save_entries(user_id, entries)

    return entry


def delete_entry(entry_id, user_id):
    """Remove the entry with `entry_id`. Returns False if there was nothing to remove."""
    with store.locked(ENTRIES, user_id):
        entries = get_entries(user_id)
        remaining = [e for e in entries if e.id != entry_id]

        if len(remaining) == len(entries):
            return False  # Entry not found

        _save_entries(user_id, remaining)

    return True
