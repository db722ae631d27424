"""
Pytest fixtures for the beverage ordering backend tests.

Provides the application, a cleared database per test, the default seed
(admin, officeBoy, ahmed, sara plus twelve beverages) and login helpers.
"""

import queue

import pytest

from office_beverages import create_app
from office_beverages.extensions import db
from office_beverages.models import Beverage, User
from office_beverages.services import seed_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_LOG_ROUNDS': 4,
        'NOTIFICATION_KEEPALIVE_SECONDS': 1,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def seed(db_session):
    """Default users and beverages."""
    seed_service.seed_database()
    db_session.commit()
    return {
        "users": {u.username: u for u in db_session.query(User).all()},
        "beverages": {b.name: b for b in db_session.query(Beverage).all()},
    }


@pytest.fixture(scope='function')
def hub(app):
    """The application's notification hub."""
    return app.extensions["notification_hub"]


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json['data']['token']
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def drain(subscriber) -> list[dict]:
    """Every payload currently queued for a hub subscriber."""
    payloads = []
    while True:
        try:
            _, payload = subscriber.queue.get_nowait()
        except queue.Empty:
            return payloads
        payloads.append(payload)


@pytest.fixture(scope='function')
def admin_headers(client, seed):
    return auth_headers(get_auth_token(client, 'admin', 'admin123'))


@pytest.fixture(scope='function')
def office_boy_headers(client, seed):
    return auth_headers(get_auth_token(client, 'officeBoy', 'office123'))


@pytest.fixture(scope='function')
def employee_headers(client, seed):
    """Logged in as ahmed (IT)."""
    return auth_headers(get_auth_token(client, 'ahmed', 'ahmed123'))


@pytest.fixture(scope='function')
def other_employee_headers(client, seed):
    """Logged in as sara (HR)."""
    return auth_headers(get_auth_token(client, 'sara', 'sara123'))
