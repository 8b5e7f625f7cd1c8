import json
import logging
import threading
from contextlib import contextmanager

from flask import current_app, has_app_context

from weight_tracker.storage.filesystem import LocalFileSystem
from weight_tracker.storage.migration import migrate_if_needed

logger = logging.getLogger(__name__)

USERS = 'users'
ENTRIES = 'entries'
SETTINGS = 'settings'
WATER = 'water'

DOMAINS = (USERS, ENTRIES, SETTINGS, WATER)

# The users domain keeps every account in a single document
USERS_KEY = 'users'


class DocumentStore:
    """
    Key-value store of JSON documents, one file per (domain, key).

    Layout under the root directory:

        users/users.json        array of users
        entries/<user>.json     array of weight entries
        settings/<user>.json    settings object
        water/<user>.json       array of water entries

    Used like a Flask extension: create it once and call `init_app(app)`. The
    root directory is then read from the current app's `CONFIG_PATH`, so several
    apps can share one instance. A store built with an explicit `root` always
    uses that root.
    """

    def __init__(self, app=None, root=None, fs=None):
        self._root = root
        self.fs = fs or LocalFileSystem()
        self._locks = {}
        self._locks_guard = threading.Lock()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.config.setdefault('CONFIG_PATH', '/config')
        app.extensions['document_store'] = self

    @property
    def root(self):
        if self._root:
            return self._root
        if has_app_context() and current_app.extensions.get('document_store') is self:
            return current_app.config['CONFIG_PATH']
        return None

    def _require_root(self):
        if not self.root:
            raise RuntimeError('DocumentStore has no root directory; call init_app() first')
        return self.root

    def path_for(self, domain, key):
        if domain not in DOMAINS:
            raise ValueError(f"Unknown domain: {domain}")
        if not key or key in ('.', '..') or '/' in key or '\\' in key:
            raise ValueError(f"Invalid document key: {key!r}")
        return self.fs.join(self._require_root(), domain, f"{key}.json")

    def legacy_path_for(self, domain, key):
        root = self._require_root()
        if domain == USERS:
            return self.fs.join(root, 'users.json')
        if domain in (ENTRIES, SETTINGS):
            return self.fs.join(root, f"{domain}-{key}.json")
        return None

    def ensure_directories(self):
        root = self._require_root()
        self.fs.makedirs(root)
        for domain in DOMAINS:
            self.fs.makedirs(self.fs.join(root, domain))

    def migrate_if_needed(self, domain, key):
        return migrate_if_needed(
            self.fs,
            domain,
            self.legacy_path_for(domain, key),
            self.path_for(domain, key),
        )

    def prepare(self, domain, key):
        """Make sure the layout exists and any legacy file for (domain, key) has been moved."""
        self.ensure_directories()
        with self.locked(domain, key):
            self.migrate_if_needed(domain, key)

    def exists(self, domain, key):
        return self.fs.exists(self.path_for(domain, key))

    def get(self, domain, key):
        """Return the parsed document, or None if its file does not exist."""
        try:
            text = self.fs.read_text(self.path_for(domain, key))
        except FileNotFoundError:
            return None
        return json.loads(text)

    def put(self, domain, key, document):
        self.fs.write_text(self.path_for(domain, key), json.dumps(document, indent=2, allow_nan=False))
        logger.debug('Wrote %s/%s', domain, key)

    @contextmanager
    def locked(self, domain, key):
        """Serialize read-modify-write sequences on one document within this process."""
        path = self.path_for(domain, key)
        with self._locks_guard:
            lock = self._locks.setdefault(path, threading.RLock())
        with lock:
            yield
