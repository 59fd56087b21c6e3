"""Shared test fixtures."""

from datetime import UTC, date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from caterstaff.core.clock import FixedClock, get_clock
from caterstaff.core.database import get_session
from caterstaff.main import app
from caterstaff.models import Event, TeamMember

NOW = datetime(2025, 6, 2, 9, 0, tzinfo=UTC)


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


@pytest.fixture(name="clock")
def clock_fixture() -> FixedClock:
    """Clock pinned to Monday 2 June 2025, 09:00 UTC."""
    return FixedClock(NOW)


@pytest.fixture(name="client")
def client_fixture(session: Session, clock: FixedClock):
    """Create a test client with the test database session and clock."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_clock] = lambda: clock
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="wedding")
def wedding_fixture(session: Session) -> Event:
    """A 120 guest wedding on Saturday 14 June 2025."""
    event = Event(
        name="Mariage Dupont",
        date=date(2025, 6, 14),
        time="19h - 2h",
        venue="Château de Vaux",
        guest_count=120,
        event_type="wedding",
        status="confirmed",
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@pytest.fixture(name="team")
def team_fixture(session: Session) -> dict[str, TeamMember]:
    """A small team, keyed by first name."""
    members = {
        "julie": TeamMember(name="Julie Martin", phone="06 12 34 56 78", role="Serveuse"),
        "marc": TeamMember(name="Marc Petit", phone="0611111111", role="Serveur"),
        "sophie": TeamMember(name="Sophie Bernard", phone="0622222222", role="Serveuse"),
        "lucas": TeamMember(name="Lucas Moreau", phone="0633333333", role="Serveur"),
        "emma": TeamMember(name="Emma Laurent", phone="0644444444", role="Serveuse"),
        "hugo": TeamMember(name="Hugo Girard", phone="0655555555", role="Serveur"),
        "paul": TeamMember(name="Paul Roux", phone="0666666666", role="Chef cuisinier"),
        "leo": TeamMember(name="Léo Fournier", phone="0677777777", role="Barman"),
    }
    for member in members.values():
        session.add(member)
    session.commit()
    for member in members.values():
        session.refresh(member)
    return members
