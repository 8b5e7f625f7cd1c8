import logging
import re

from weight_tracker.errors import AuthError, NotFoundError, ValidationError
from weight_tracker.extensions import store
from weight_tracker.storage.document_store import USERS, USERS_KEY
from weight_tracker.utils import utc_now_iso

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r'[A-Za-z0-9_]{3,20}')
MIN_PASSWORD_LENGTH = 6
ROLES = ('admin', 'user')

DEFAULT_ADMIN_USERNAME = 'admin'
DEFAULT_ADMIN_PASSWORD = 'changeme'


class User:
    def __init__(self, username, password, nickname=None, role='user', created_at=None):
        self.username = username
        self.password = password
        self.nickname = nickname or username
        self.role = role
        self.created_at = created_at or utc_now_iso()

    @classmethod
    def from_dict(cls, data, index=0):
        """Build a user from its stored form, backfilling role and createdAt for older records."""
        return cls(
            username=data['username'],
            password=data.get('password', ''),
            nickname=data.get('nickname'),
            role=data.get('role') or ('admin' if index == 0 else 'user'),
            created_at=data.get('createdAt'),
        )

    def to_dict(self, include_password=True):
        data = {
            'username': self.username,
            'nickname': self.nickname,
            'role': self.role,
            'createdAt': self.created_at,
        }
        if include_password:
            data['password'] = self.password
        return data

    def to_session_dict(self):
        return {
            'username': self.username,
            'nickname': self.nickname,
            'role': self.role,
        }

    def __repr__(self):
        return f"<User {self.username} ({self.role})>"


def _save_users(users):
    store.ensure_directories()
    store.put(USERS, USERS_KEY, [user.to_dict() for user in users])


def get_users():
    store.prepare(USERS, USERS_KEY)

    with store.locked(USERS, USERS_KEY):
        data = store.get(USERS, USERS_KEY)
        if data is None:
            # First run: create the default admin user
            users = [
                User(
                    username=DEFAULT_ADMIN_USERNAME,
                    password=DEFAULT_ADMIN_PASSWORD,
                    nickname='Administrator',
                    role='admin',
                )
            ]
            _save_users(users)
            logger.warning(
                "No users file found, created default '%s' account; change its password",
                DEFAULT_ADMIN_USERNAME,
            )
            return users

    return [User.from_dict(item, index) for index, item in enumerate(data)]


def _find_index(users, username):
    return next((i for i, user in enumerate(users) if user.username == username), -1)


def validate_user(username, password):
    """Return the user if both username and password match exactly, otherwise None."""
    for user in get_users():
        if user.username == username and user.password == password:
            return user
    return None


def get_user_by_username(username):
    return next((user for user in get_users() if user.username == username), None)


def _validate_role(role):
    if role not in ROLES:
        raise ValidationError('Invalid role. Must be "admin" or "user"')


def create_user(data):
    username = data.get('username') or ''
    password = data.get('password') or ''
    role = data.get('role') or 'user'

    with store.locked(USERS, USERS_KEY):
        users = get_users()

        # Check if username already exists
        if _find_index(users, username) != -1:
            raise ValidationError('Username already exists')

        if not isinstance(username, str) or not USERNAME_PATTERN.fullmatch(username):
            raise ValidationError('Username must be 3-20 alphanumeric characters')

        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')

        _validate_role(role)

        user = User(
            username=username,
            password=password,
            nickname=data.get('nickname') or username,
            role=role,
        )
        users.append(user)
        _save_users(users)

    logger.info('Created %s user %s', role, username)
    return user


def update_user_password(username, current_password, new_password):
    with store.locked(USERS, USERS_KEY):
        users = get_users()
        index = _find_index(users, username)

        if index == -1:
            raise NotFoundError('User not found')

        if users[index].password != current_password:
            raise AuthError('Current password is incorrect')

        if not isinstance(new_password, str) or len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f'New password must be at least {MIN_PASSWORD_LENGTH} characters')

        users[index].password = new_password
        _save_users(users)

    logger.info('Password changed for %s', username)


def update_user(username, nickname=None, role=None):
    """Partial update: only the fields that are not None change."""
    with store.locked(USERS, USERS_KEY):
        users = get_users()
        index = _find_index(users, username)

        if index == -1:
            raise NotFoundError('User not found')

        if nickname is not None:
            users[index].nickname = nickname

        if role is not None:
            _validate_role(role)
            users[index].role = role

        _save_users(users)

    return users[index]


def delete_user(username):
    with store.locked(USERS, USERS_KEY):
        users = get_users()
        index = _find_index(users, username)

        if index == -1:
            raise NotFoundError('User not found')

        users.pop(index)
        _save_users(users)

    logger.info('Deleted user %s', username)


def get_users_without_passwords():
    return [user.to_dict(include_password=False) for user in get_users()]
