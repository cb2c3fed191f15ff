from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import sessionlog.models  # noqa: F401  (register tables on Base.metadata)
from sessionlog.api import deps as api_deps
from sessionlog.db.base import Base
from sessionlog.db.session import get_db
from sessionlog.main import app
from sessionlog.models.user import User
from sessionlog.models.user_log import UserLog
from sessionlog.services.auth_service import create_access_token, hash_password

DEFAULT_PASSWORD = "correct-horse-42"

# -----------------------------------------------------------------------------
# Database Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="function")
def db_engine():
    """
    In-memory SQLite engine, one per test.
    StaticPool keeps a single connection so every session sees the same data.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()

    yield session

    session.close()


# -----------------------------------------------------------------------------
# Client Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="function")
def client(db_session):
    """
    TestClient with overridden get_db dependency to use the isolated db_session.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[api_deps.get_db] = override_get_db

    # Using 'with' context manager to trigger lifespan events (startup/shutdown)
    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# -----------------------------------------------------------------------------
# Factories
# -----------------------------------------------------------------------------


@pytest.fixture
def make_user(db_session):
    """Persist a user; the password is DEFAULT_PASSWORD unless given."""

    def _make(
        email: str = "ana@acme.io",
        full_name: str = "Ana Perez",
        role: str = "user",
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        user = User(
            email=email,
            full_name=full_name,
            role=role,
            password_hash=hash_password(password),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def user(make_user) -> User:
    return make_user()


@pytest.fixture
def admin(make_user) -> User:
    return make_user(email="root@acme.io", full_name="Site Admin", role="admin")


@pytest.fixture
def bearer():
    """Authorization header for a user, without going through login."""

    def _bearer(user: User) -> dict:
        token = create_access_token(user.id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _bearer


@pytest.fixture
def make_log(db_session):
    """Insert a user log entry directly, with an explicit login_time."""
    base_time = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def _make(
        user: User,
        minutes: int = 0,
        token: str = "token",
        ip_address: str = "203.0.113.7",
        logout_after: int | None = None,
    ) -> UserLog:
        login_time = base_time + timedelta(minutes=minutes)
        entry = UserLog(
            user_id=user.id,
            role=user.role,
            login_time=login_time,
            logout_time=(
                login_time + timedelta(minutes=logout_after)
                if logout_after is not None
                else None
            ),
            token=token,
            ip_address=ip_address,
        )
        db_session.add(entry)
        db_session.commit()
        db_session.refresh(entry)
        return entry

    return _make
