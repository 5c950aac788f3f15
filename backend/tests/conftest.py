"""
Pytest fixtures for estatebooks backend tests.

Provides the app on in-memory SQLite, a test client, per-test table cleanup,
entity stores for both backends, actors per role, and logged-in API users.
"""

import pytest
from estatebooks import create_app
from estatebooks.extensions import db, get_entity_store
from estatebooks.permissions import Actor
from estatebooks.services import auth_service
from estatebooks.storage import MemoryEntityStore

TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORAGE_BACKEND': 'sql',
        'BCRYPT_ROUNDS': 4,
        'CURRENCY_LABEL': 'EGP',
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
def memory_store():
    return MemoryEntityStore()


@pytest.fixture(scope='function')
def sql_store(db_session):
    return get_entity_store()


@pytest.fixture(scope='function', params=['memory', 'sql'])
def store(request, db_session):
    """Every service test runs once per storage backend."""
    if request.param == 'memory':
        return MemoryEntityStore()
    return get_entity_store()


@pytest.fixture
def manager():
    return Actor(id="user-manager", role="manager")


@pytest.fixture
def accountant():
    return Actor(id="user-accountant", role="accountant")


@pytest.fixture
def employee():
    return Actor(id="user-employee", role="employee")


@pytest.fixture(scope='function')
def users(db_session):
    """One user per role, keyed by role name."""
    created = {}
    for role in ("manager", "accountant", "employee"):
        created[role] = auth_service.create_user(
            username=role,
            email=f"{role}@example.com",
            password=TEST_PASSWORD,
            role=role,
        )
    return created


def get_auth_token(client, username: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def manager_headers(client, users):
    return auth_headers(get_auth_token(client, "manager"))


@pytest.fixture
def accountant_headers(client, users):
    return auth_headers(get_auth_token(client, "accountant"))


@pytest.fixture
def employee_headers(client, users):
    return auth_headers(get_auth_token(client, "employee"))


@pytest.fixture
def login(client, users):
    """Log in as one of the seeded users; returns the raw session token."""
    def _login(username: str, password: str = TEST_PASSWORD):
        return get_auth_token(client, username, password)
    return _login
