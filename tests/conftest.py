"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.core.database import get_session
from app.core.store import DocumentStore, subscriptions
from app.main import app
from app.models import Event, UserProfile


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session: Session):
    """Document store over the test session, with no leftover subscribers."""
    yield DocumentStore(session)
    subscriptions.clear()


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
    subscriptions.clear()


@pytest.fixture(name="admin")
def admin_fixture(session: Session) -> UserProfile:
    """An admin profile."""
    user = UserProfile(id="admin-1", name="Alice Admin", email="alice@example.com", role="admin")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="member")
def member_fixture(session: Session) -> UserProfile:
    """A regular user profile."""
    user = UserProfile(id="user-1", name="Bob Member", email="bob@example.com", role="user")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="admin_headers")
def admin_headers_fixture(admin: UserProfile) -> dict:
    return {"X-User-Id": admin.id}


@pytest.fixture(name="member_headers")
def member_headers_fixture(member: UserProfile) -> dict:
    return {"X-User-Id": member.id}


@pytest.fixture(name="sample_event")
def sample_event_fixture(session: Session, admin: UserProfile) -> Event:
    """A public event whose date options are a few days out."""
    start = datetime.now(UTC) + timedelta(days=3)
    options = [
        start.replace(microsecond=0).isoformat(),
        (start + timedelta(days=1)).replace(microsecond=0).isoformat(),
    ]
    event = Event(
        name="Team Dinner",
        description="Dinner after the release",
        location="Main Street Bistro",
        date_options=options,
        items=["Wine", "Dessert"],
        host_id=admin.id,
        host_name=admin.name,
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@pytest.fixture(name="imminent_event")
def imminent_event_fixture(session: Session, admin: UserProfile) -> Event:
    """An event starting in 30 minutes: voting and RSVPs are closed."""
    start = datetime.now(UTC) + timedelta(minutes=30)
    event = Event(
        name="Standup",
        date_options=[start.replace(microsecond=0).isoformat()],
        host_id=admin.id,
        host_name=admin.name,
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@pytest.fixture(name="private_event")
def private_event_fixture(session: Session, admin: UserProfile) -> Event:
    """A private event visible only to its host and admins."""
    event = Event(
        name="Surprise Party",
        date_options=["2030-06-01T18:00:00Z"],
        host_id=admin.id,
        host_name=admin.name,
        privacy="private",
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event
