import copy
import logging

from weight_tracker.errors import ValidationError
from weight_tracker.extensions import store
from weight_tracker.models.activity import CustomActivity, default_activities, validate_activities
from weight_tracker.storage.document_store import SETTINGS
from weight_tracker.utils import is_number, utc_now_iso

logger = logging.getLogger(__name__)

UNITS = ('kg', 'lb')
WATER_UNITS = ('ml', 'oz')
CHART_COLORS = ('primary', 'blue', 'green', 'orange', 'purple')

DATE_FORMAT_PRESETS = (
    'dd/MM/yyyy',   # 06/01/2025 (EU)
    'MM/dd/yyyy',   # 01/06/2025 (US)
    'yyyy-MM-dd',   # 2025-01-06 (ISO)
    'dd MMM yyyy',  # 06 Jan 2025
    'EEE dd/MM',    # Mon 06/01
    'EEE.dd/MM',    # Mon.06/01
    'dd/MM',        # 06/01
    'MMM dd',       # Jan 06
    'custom',
)
TIME_FORMATS = ('HH:mm', 'hh:mm a', 'none')
LOCALES = ('en', 'it', 'de', 'fr', 'es')
FORMAT_SECTIONS = ('tableFormat', 'tooltipFormat', 'axisFormat')

DEFAULT_DATE_FORMAT = {
    'locale': 'it',
    'tableFormat': {
        'dateFormat': 'EEE.dd/MM',
        'timeFormat': 'HH:mm',
        'showWeekday': False,  # already in the pattern
    },
    'tooltipFormat': {
        'dateFormat': 'dd/MM/yyyy',
        'timeFormat': 'HH:mm',
        'showWeekday': True,
    },
    'axisFormat': {
        'dateFormat': 'dd/MM',
        'timeFormat': 'none',
        'showWeekday': False,
    },
}

# Fields a settings update may change
MUTABLE_FIELDS = ('unit', 'waterUnit', 'targetWeight', 'chartColor', 'dateFormat', 'activities')


def normalize_date_format(value):
    """Merge stored date format settings over the defaults, section by section."""
    if not isinstance(value, dict):
        return copy.deepcopy(DEFAULT_DATE_FORMAT)

    normalized = {'locale': value.get('locale') or DEFAULT_DATE_FORMAT['locale']}
    for section in FORMAT_SECTIONS:
        stored = value.get(section)
        normalized[section] = {
            **DEFAULT_DATE_FORMAT[section],
            **(stored if isinstance(stored, dict) else {}),
        }
    return normalized


class UserSettings:
    def __init__(self, user_id, unit='kg', water_unit='ml', target_weight=None,
                 chart_color='primary', date_format=None, activities=None,
                 created_at=None, updated_at=None):
        now = utc_now_iso()
        self.user_id = user_id
        self.unit = unit
        self.water_unit = water_unit
        self.target_weight = target_weight
        self.chart_color = chart_color
        self.date_format = normalize_date_format(date_format)
        self.activities = activities or default_activities()
        self.created_at = created_at or now
        self.updated_at = updated_at or now

    @classmethod
    def from_dict(cls, data, user_id):
        """Build settings from a stored document, filling in anything older files lack."""
        activities = data.get('activities')
        if isinstance(activities, list) and activities:
            activities = [CustomActivity.from_dict(a) for a in activities if isinstance(a, dict)]
        else:
            activities = None

        return cls(
            user_id=data.get('userId') or user_id,
            unit=data.get('unit') or 'kg',
            water_unit=data.get('waterUnit') or 'ml',
            target_weight=data.get('targetWeight'),
            chart_color=data.get('chartColor') or 'primary',
            date_format=data.get('dateFormat'),
            activities=activities,
            created_at=data.get('createdAt'),
            updated_at=data.get('updatedAt'),
        )

    def to_dict(self):
        return {
            'userId': self.user_id,
            'unit': self.unit,
            'waterUnit': self.water_unit,
            'targetWeight': self.target_weight,
            'chartColor': self.chart_color,
            'dateFormat': copy.deepcopy(self.date_format),
            'activities': [activity.to_dict() for activity in self.activities],
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }


def _is_valid_single_date_format(value):
    if not isinstance(value, dict):
        return False
    if value.get('dateFormat') not in DATE_FORMAT_PRESETS:
        return False
    if value.get('timeFormat') not in TIME_FORMATS:
        return False
    if not isinstance(value.get('showWeekday'), bool):
        return False
    if value['dateFormat'] == 'custom' and not isinstance(value.get('customDateFormat'), str):
        return False
    return True


def is_valid_date_format_settings(value):
    if not isinstance(value, dict):
        return False
    if value.get('locale') not in LOCALES:
        return False
    return all(_is_valid_single_date_format(value.get(section)) for section in FORMAT_SECTIONS)


def validate_settings_update(data):
    """Return the subset of `data` a settings update may apply, raising ValidationError on bad values."""
    if not isinstance(data, dict):
        raise ValidationError('Settings must be an object')

    changes = {key: data[key] for key in MUTABLE_FIELDS if key in data}

    if 'unit' in changes and changes['unit'] not in UNITS:
        raise ValidationError('Invalid unit value. Must be "kg" or "lb"')

    if 'waterUnit' in changes and changes['waterUnit'] not in WATER_UNITS:
        raise ValidationError('Invalid water unit value. Must be "ml" or "oz"')

    target_weight = changes.get('targetWeight')
    if target_weight is not None and (not is_number(target_weight) or target_weight <= 0):
        raise ValidationError('Invalid target weight value')

    if 'chartColor' in changes and changes['chartColor'] not in CHART_COLORS:
        raise ValidationError('Invalid chart color value')

    if 'dateFormat' in changes and not is_valid_date_format_settings(changes['dateFormat']):
        raise ValidationError('Invalid date format settings')

    if 'activities' in changes:
        changes['activities'] = [a.to_dict() for a in validate_activities(changes['activities'])]

    return changes


def get_settings(user_id):
    store.prepare(SETTINGS, user_id)

    with store.locked(SETTINGS, user_id):
        data = store.get(SETTINGS, user_id)
        if data is None:
            # File doesn't exist, create with defaults
            settings = UserSettings(user_id)
            store.put(SETTINGS, user_id, settings.to_dict())
            return settings

    return UserSettings.from_dict(data, user_id)


def update_settings(data, user_id):
    changes = validate_settings_update(data)

    with store.locked(SETTINGS, user_id):
        document = get_settings(user_id).to_dict()
        document.update(changes)
        document['updatedAt'] = utc_now_iso()
        store.put(SETTINGS, user_id, document)

    logger.info('Updated settings for %s: %s', user_id, ', '.join(sorted(changes)) or 'no changes')
    return UserSettings.from_dict(document, user_id)
