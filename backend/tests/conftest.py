import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from user_orders.core.config import load_settings
from user_orders.core.database import create_db_engine, create_session_factory
from user_orders.core.security import PasswordHasher
from user_orders.main import create_app
from user_orders.services.user_service import UserService
from user_orders.storage.user_store import UserStore

# bcrypt's minimum cost keeps hashing fast in tests
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def settings():
    return load_settings(
        DB_URI="sqlite://",
        DB_USER="test",
        DB_PASSWORD="test",
        BCRYPT_SALT_ROUNDS=TEST_BCRYPT_ROUNDS,
    )


@pytest.fixture
def engine():
    # One shared in-memory connection, so every session sees the same database
    engine = create_db_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def password_hasher():
    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def store(session_factory, password_hasher):
    return UserStore(session_factory, password_hasher)


@pytest.fixture
def service(store):
    return UserService(store)


@pytest.fixture
def app(settings, engine):
    return create_app(settings, engine=engine)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_payload():
    """Factory for camelCase user payloads as the API receives them"""

    def build(user_id: int = 1, username: str = "john_doe", **overrides):
        payload = {
            "userId": user_id,
            "username": username,
            "password": "s3cret-pass",
            "fullName": {"firstName": "jOHN", "lastName": "doE"},
            "age": 30,
            "email": "john@example.com",
            "isActive": True,
            "hobbies": ["reading", "chess"],
            "address": {"street": "1 Main St", "city": "Springfield", "country": "USA"},
        }
        payload.update(overrides)
        return payload

    return build
