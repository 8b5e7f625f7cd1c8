import pytest
from pathlib import Path

from weight_tracker.app import create_app


@pytest.fixture
def app(tmp_path):
    """Create application for the tests, storing data under a temporary directory."""
    app = create_app('testing', config_path=tmp_path / 'config')

    with app.app_context():
        yield app


@pytest.fixture
def config_dir(app):
    return Path(app.config['CONFIG_PATH'])


@pytest.fixture
def client(app):
    """Create a test client for the app."""
    return app.test_client()


@pytest.fixture
def auth_client(client):
    """A test client logged in as the default admin."""
    response = client.post('/api/auth/login', json={
        'username': 'admin',
        'password': 'changeme'
    })
    assert response.status_code == 200
    return client
