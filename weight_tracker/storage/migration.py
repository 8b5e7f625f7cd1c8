"""
One-time move of legacy flat files into the per-domain directory layout.

    <root>/users.json             -> <root>/users/users.json
    <root>/entries-<user>.json    -> <root>/entries/<user>.json
    <root>/settings-<user>.json   -> <root>/settings/<user>.json

The legacy layout is the implicit v1 of each document; the presence of the
new file marks v2. Upgrading the contents is a pure text -> text function so
it can be tested on its own; `migrate_if_needed` only adds the move.
"""

import json
import logging

from weight_tracker.utils import utc_now_iso

logger = logging.getLogger(__name__)


def _upgrade_users(users, now):
    # Add role and createdAt to users that don't have them
    return [
        {
            **user,
            'role': user.get('role') or ('admin' if index == 0 else 'user'),
            'createdAt': user.get('createdAt') or now,
        }
        for index, user in enumerate(users)
    ]


def upgrade_legacy_document(domain, text, now=None):
    """
    Turn the contents of a legacy file into the contents of its v2 file.

    Entries and settings are carried over verbatim; they are parsed only so
    that a corrupt legacy file fails the migration instead of being copied.
    The legacy users list has `role` and `createdAt` backfilled.
    """
    document = json.loads(text)
    if domain != 'users':
        return text
    if not isinstance(document, list):
        raise ValueError('Legacy users file must contain a JSON array')
    return json.dumps(_upgrade_users(document, now or utc_now_iso()), indent=2)


def migrate_if_needed(fs, domain, legacy_path, new_path):
    """
    Move `legacy_path` to `new_path` if only the legacy file exists.

    Returns True when a migration happened. New data always wins: once
    `new_path` exists the legacy file is never consulted again. Read and
    parse errors propagate with both files left as they were.
    """
    if legacy_path is None:
        return False
    if fs.exists(new_path) or not fs.exists(legacy_path):
        return False

    upgraded = upgrade_legacy_document(domain, fs.read_text(legacy_path))
    fs.write_text(new_path, upgraded)
    fs.remove(legacy_path)

    logger.info('Migrated %s data from %s to %s', domain, legacy_path, new_path)
    return True
