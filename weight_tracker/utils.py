import math
import random
import re
import string
import time
from datetime import date, datetime, timezone

ID_ALPHABET = string.digits + string.ascii_lowercase

# Seconds fraction of an ISO-8601 time, any number of digits
FRACTION_RE = re.compile(r'([Tt ]\d{2}:\d{2}:\d{2})\.(\d+)')


def generate_id(prefix='', existing=()):
    """
    Generate a unique string id of the form <epoch-ms>-<7 base36 chars>.

    `existing` is the collection of ids already in use; a new id is drawn
    until it does not collide.
    """
    while True:
        suffix = ''.join(random.choices(ID_ALPHABET, k=7))
        new_id = f"{prefix}{int(time.time() * 1000)}-{suffix}"
        if new_id not in existing:
            return new_id


def utc_now_iso():
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2025-01-06T10:00:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.strftime('%Y-%m-%dT%H:%M:%S.') + f"{now.microsecond // 1000:03d}Z"


def today_date():
    return date.today().strftime('%Y-%m-%d')


def parse_timestamp(value):
    """Parse an ISO-8601 timestamp into an aware datetime (naive values are taken as UTC)."""
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'
    # fromisoformat before 3.11 only takes 3 or 6 fraction digits
    text = FRACTION_RE.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_number(value):
    # bool is a subclass of int but never a valid amount
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    return math.isfinite(value)
