import os

# Set testing flag and secrets before importing the app
os.environ["TESTING"] = "true"
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import db_models
from core.security import hash_password
from db_config import Base, enable_sqlite_foreign_keys, get_db
from main import app


# TEST DATABASE CONFIGURATION

# In-memory SQLite by default; point TEST_DATABASE_URL at Postgres to run
# against the production dialect
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")

# Create test engine
if TEST_DATABASE_URL.startswith("sqlite"):
    test_engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    test_engine = create_engine(TEST_DATABASE_URL)
enable_sqlite_foreign_keys(test_engine)

# Create test session factory
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


# DATABASE FIXTURES
@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Creates all tables before test, drops them after test.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()

    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test (clean slate for next test)
        Base.metadata.drop_all(bind=test_engine)


# CLIENT FIXTURE
@pytest.fixture(scope="function")
def client(db_session):
    """
    Creates a test client with overridden database dependency.
    """

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# AUTHENTICATION FIXTURES
@pytest.fixture(scope="function")
def test_user(client):
    """
    Creates a test user and returns their credentials
    """
    user_data = {"email": "test@example.com", "password": "testpass123"}

    response = client.post("/api/auth/register", json=user_data)
    assert response.status_code == 201

    return user_data


@pytest.fixture(scope="function")
def auth_token(client, test_user):
    """
    Creates a user and returns their authentication token.
    """
    login_response = client.post("/api/auth/login", json=test_user)

    assert login_response.status_code == 200
    return login_response.json()["token"]


@pytest.fixture(scope="function")
def authenticated_client(client, auth_token):
    """
    Returns a client with authentication headers already set.
    """
    client.headers = {**client.headers, "Authorization": f"Bearer {auth_token}"}

    return client


@pytest.fixture(scope="function")
def create_user_and_token(client):
    """
    Factory fixture that creates a user and returns their token.
    Can be called multiple times to create multiple users.
    """

    def _create_user(email: str, password: str = "password123"):
        client.post("/api/auth/register", json={"email": email, "password": password})

        login_response = client.post(
            "/api/auth/login", json={"email": email, "password": password}
        )

        return login_response.json()["token"]

    return _create_user


@pytest.fixture(scope="function")
def make_user(db_session):
    """
    Factory fixture that inserts a user straight into the database,
    for service-level tests that skip HTTP.
    """

    def _make_user(email: str) -> db_models.User:
        user = db_models.User(email=email, hashed_password=hash_password("password123"))
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user