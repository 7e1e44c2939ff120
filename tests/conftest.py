"""Shared fixtures: in-memory database, application client and authenticated headers."""

import pytest
from fastapi.testclient import TestClient

from todo_api.config import Settings
from todo_api.core.database import DatabaseManager
from todo_api.main import create_application

TEST_SECRET = "test-secret-key-that-is-long-enough-0123456789"


@pytest.fixture()
def settings() -> Settings:
    """Settings isolated from the environment: in-memory SQLite, cheap bcrypt."""
    return Settings(
        ENVIRONMENT="testing",
        DATABASE_URL="sqlite://",
        JWT_SECRET_KEY=TEST_SECRET,
        JWT_ISSUER="todo-api-tests",
        JWT_AUDIENCE="todo-api-test-clients",
        BCRYPT_ROUNDS=4,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture()
def database(settings: Settings):
    manager = DatabaseManager(settings)
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture()
def db_session(database: DatabaseManager):
    with database.session() as session:
        yield session


@pytest.fixture()
def client(settings: Settings):
    app = create_application(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers(client: TestClient) -> dict:
    """Register and log in a user, returning the bearer header."""
    response = client.post("/api/auth/register", json={"username": "tester", "password": "secret1"})
    assert response.status_code == 200

    response = client.post("/api/auth/login", json={"username": "tester", "password": "secret1"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
