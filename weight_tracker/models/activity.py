from weight_tracker.errors import ValidationError

MIN_ACTIVITIES = 1
MAX_ACTIVITIES = 12

# Curated icon names an activity may use, grouped the way the picker shows them
ACTIVITY_ICON_CATEGORIES = {
    'Fitness': [
        'Dumbbell', 'Activity', 'Heart', 'Flame', 'Zap',
        'Timer', 'Trophy', 'Medal', 'Target', 'TrendingUp',
    ],
    'Sports': [
        'Bike', 'Waves', 'Mountain', 'Footprints', 'PersonStanding',
        'Snowflake', 'Tent', 'TreePine', 'Compass', 'Map',
    ],
    'Rest & Wellness': [
        'Sofa', 'Moon', 'Sun', 'Coffee', 'Bed',
        'Bath', 'Sparkles', 'Wind', 'Cloud', 'Leaf',
    ],
    'General': [
        'Star', 'Circle', 'Square', 'Triangle', 'Hexagon',
        'Plus', 'Check', 'X', 'Bookmark', 'Flag',
    ],
}

ALL_ACTIVITY_ICONS = frozenset(
    icon for icons in ACTIVITY_ICON_CATEGORIES.values() for icon in icons
)

ACTIVITY_COLORS = {
    'Gray': 'text-muted-foreground',
    'Blue': 'text-blue-500',
    'Green': 'text-green-500',
    'Red': 'text-red-500',
    'Orange': 'text-orange-500',
    'Yellow': 'text-yellow-500',
    'Purple': 'text-purple-500',
    'Pink': 'text-pink-500',
    'Cyan': 'text-cyan-500',
    'Indigo': 'text-indigo-500',
}

DEFAULT_ACTIVITIES = [
    {'id': 'rest', 'label': 'Rest', 'icon': 'Sofa', 'color': 'text-muted-foreground'},
    {'id': 'weights', 'label': 'Weights', 'icon': 'Dumbbell', 'color': 'text-blue-500'},
    {'id': 'cardio', 'label': 'Cardio', 'icon': 'Activity', 'color': 'text-green-500'},
]


class CustomActivity:
    def __init__(self, id, label, icon, color):
        self.id = id
        self.label = label
        self.icon = icon
        self.color = color

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            label=data.get('label'),
            icon=data.get('icon'),
            color=data.get('color') or ACTIVITY_COLORS['Gray'],
        )

    def to_dict(self):
        return {
            'id': self.id,
            'label': self.label,
            'icon': self.icon,
            'color': self.color,
        }


def default_activities():
    return [CustomActivity.from_dict(item) for item in DEFAULT_ACTIVITIES]


def _is_non_empty_string(value):
    return isinstance(value, str) and value.strip() != ''


def validate_activities(activities):
    """
    Check an activity list before it is stored.

    Requires 1-12 activities, each with a non-empty id and label, an icon from
    ACTIVITY_ICON_CATEGORIES and a color, with ids unique across the list.
    Returns the list as CustomActivity objects.
    """
    if not isinstance(activities, list):
        raise ValidationError('Activities must be a list')

    if not MIN_ACTIVITIES <= len(activities) <= MAX_ACTIVITIES:
        raise ValidationError(
            f'Activities must contain between {MIN_ACTIVITIES} and {MAX_ACTIVITIES} items'
        )

    seen_ids = set()
    validated = []
    for activity in activities:
        if not isinstance(activity, dict):
            raise ValidationError('Each activity must be an object')

        activity_id = activity.get('id')
        if not _is_non_empty_string(activity_id):
            raise ValidationError('Each activity must have an id')
        if activity_id in seen_ids:
            raise ValidationError(f'Duplicate activity id: {activity_id}')
        seen_ids.add(activity_id)

        if not _is_non_empty_string(activity.get('label')):
            raise ValidationError('Each activity must have a label')

        if activity.get('icon') not in ALL_ACTIVITY_ICONS:
            raise ValidationError(f"Invalid activity icon: {activity.get('icon')}")

        if not _is_non_empty_string(activity.get('color')):
            raise ValidationError('Each activity must have a color')

        validated.append(CustomActivity.from_dict(activity))

    return validated
