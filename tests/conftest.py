import pytest
from fastapi.testclient import TestClient

from users_api.config import Settings
from users_api.database import Database
from users_api.main import create_app
from users_api.security import PasswordHasher
from users_api.services.user_service import UserService

# Lowest bcrypt cost so the suite stays fast
TEST_ROUNDS = 4


@pytest.fixture
def settings():
    return Settings({
        "DATABASE_URL": "sqlite://",
        "BCRYPT_ROUNDS": str(TEST_ROUNDS),
        "ENV": "development",
        "CORS_ORIGIN": "",
    })


@pytest.fixture
def database(settings):
    db = Database(settings.database_url)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    db = database.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=TEST_ROUNDS)


@pytest.fixture
def service(session, hasher):
    return UserService(session, hasher)


@pytest.fixture
def app(settings, database):
    return create_app(settings, database=database)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
