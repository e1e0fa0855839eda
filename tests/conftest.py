# tests/conftest.py
"""
Pytest fixtures for AuthHub tests.

Every test gets a fresh in-memory SQLite database with foreign keys enforced,
a seeded owner -> project -> environment chain and a recording email transport.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from authhub.database import Base, enable_sqlite_foreign_keys
from authhub.domain.email.transport import EmailMessage, EmailTransportError
from authhub.models import AuthProvider, Environment, Project, User


class RecordingTransport:
    """Email transport that keeps messages instead of sending them."""

    name = "recording"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> dict:
        if self.fail:
            raise EmailTransportError("provider unavailable")
        self.sent.append(message)
        return {"id": f"msg-{len(self.sent)}"}


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def engine():
    """Fresh in-memory database shared by every connection of one test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# Tenant fixtures
# =============================================================================

@pytest.fixture
def owner(db):
    """Platform user that owns projects (no environment)."""
    user = User(email="owner@example.com", full_name="Olivia Owner")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def project(db, owner):
    project = Project(app_name="Acme", user_owner_id=owner.id)
    db.add(project)
    db.commit()
    return project


def make_environment(db, project, name="Production", suffix="1"):
    environment = Environment(
        name=name,
        app_url="https://acme.example.com",
        public_key=f"pk_test_{suffix}",
        secret_key=f"sk_test_{suffix}",
        token_expiration="1d",
        refresh_token_expiration="5d",
        auth_provider=AuthProvider.MagicLogin,
        project_id=project.id,
    )
    db.add(environment)
    db.commit()
    return environment


@pytest.fixture
def environment(db, project):
    return make_environment(db, project)


@pytest.fixture
def other_environment(db, project):
    return make_environment(db, project, name="Staging", suffix="2")


@pytest.fixture
def end_user(db, environment):
    """Tenant user signed up to the environment."""
    user = User(
        email="ada@example.com",
        full_name="Ada Lovelace",
        environment_id=environment.id,
        email_confirmed=True,
        last_sign_in=datetime(2026, 1, 1, 12, 0),
    )
    db.add(user)
    db.commit()
    return user


# =============================================================================
# Email
# =============================================================================

@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def failing_transport():
    return RecordingTransport(fail=True)
