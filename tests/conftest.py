"""Shared fixtures: settings, hasher, SQLite storage, an in-memory repository and the HTTP app."""

import os

import pytest

os.environ.setdefault("SECRET_KEY", "tests-secret-key")
os.environ.setdefault("JWT_EXPIRATION_MINUTES", "30")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi.testclient import TestClient

from app.config import Settings, TokenSettings
from app.core.security import PasswordHasher
from app.domain.schemas.role import Role
from app.domain.schemas.user import NewUser
from app.infrastructure.database import build_engine, build_session_factory, init_db
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository
from app.main import create_app
from tests.factories import PASSWORD, SECRET, InMemoryUserRepository, make_row


@pytest.fixture
def token_settings() -> TokenSettings:
    return TokenSettings(secret_key=SECRET, algorithm="HS256", expiration_minutes=30)


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture(scope="session")
def password_hash(hasher) -> str:
    return hasher.hash(PASSWORD)


@pytest.fixture
def memory_repo(password_hash) -> InMemoryUserRepository:
    return InMemoryUserRepository(
        [
            make_row(id="admin-1", email="admin@example.com", name="Ada", role="admin", password_hash=password_hash),
            make_row(
                id="user-1",
                email="user@example.com",
                name="Bob",
                role="user",
                salary="42000.50",
                national_id="987-65-4321",
                password_hash=password_hash,
            ),
            make_row(
                id="user-2",
                email="carol@example.com",
                name="Carol",
                role="user",
                salary=None,
                national_id=None,
                password_hash=password_hash,
            ),
            make_row(
                id="inactive-1",
                email="gone@example.com",
                name="Gone",
                role="user",
                is_active=False,
                password_hash=password_hash,
            ),
        ]
    )


@pytest.fixture
def db_session():
    engine = build_engine("sqlite://")
    init_db(engine)
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def sql_repo(db_session) -> SQLAlchemyUserRepository:
    return SQLAlchemyUserRepository(db_session)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        SECRET_KEY=SECRET,
        JWT_EXPIRATION_MINUTES=30,
        DATABASE_URL="sqlite://",
        BCRYPT_ROUNDS=4,
        ADMIN_EMAIL="root@example.com",
        ADMIN_NAME="Root",
        ADMIN_PASSWORD=PASSWORD,
        ENVIRONMENT="test",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def app_repo(app, client):
    """Repository bound to the running app's database (tables already created)."""
    session = app.state.session_factory()
    try:
        yield SQLAlchemyUserRepository(session)
    finally:
        session.close()


@pytest.fixture
def create_user(app_repo, hasher):
    def _create(email, name="Someone", role=Role.USER, password=PASSWORD, **extra):
        new_user = NewUser(email=email, name=name, password=password, role=role, **extra)
        return app_repo.create(new_user, hasher.hash(password))

    return _create


@pytest.fixture
def login(client):
    def _login(email, password=PASSWORD):
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login
