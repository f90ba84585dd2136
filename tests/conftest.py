"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from teamfinder.completions.coordinator import ConfirmationCoordinator
from teamfinder.completions.lifecycle import ListingLifecycleManager
from teamfinder.completions.listings import SqlListingStore
from teamfinder.completions.store import CompletionStore
from teamfinder.core.database import get_session
from teamfinder.main import app
from teamfinder.models import (
    Actor,
    ChildAvailability,
    CompletionCreate,
    MatchType,
    PlayerAvailability,
    Role,
    TeamVacancy,
)


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


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="store")
def store_fixture(session: Session) -> CompletionStore:
    return CompletionStore(session)


@pytest.fixture(name="listings")
def listings_fixture(session: Session) -> SqlListingStore:
    return SqlListingStore(session)


@pytest.fixture(name="coordinator")
def coordinator_fixture(
    store: CompletionStore, listings: SqlListingStore
) -> ConfirmationCoordinator:
    return ConfirmationCoordinator(store, ListingLifecycleManager(listings))


@pytest.fixture(name="seeded_listings")
def seeded_listings_fixture(session: Session) -> dict:
    """One active listing of each kind."""
    listings = {
        "vacancy": TeamVacancy(id="v1", title="Riverside U12 Blues", posted_by="c1"),
        "availability": PlayerAvailability(
            id="a1", title="Sam Carter, central midfielder", posted_by="p1"
        ),
        "child_availability": ChildAvailability(
            id="ca1", title="Alex (U10) looking for a team", posted_by="pa1"
        ),
    }
    for listing in listings.values():
        session.add(listing)
    session.commit()
    for listing in listings.values():
        session.refresh(listing)
    return listings


def make_create(match_type: MatchType = MatchType.PLAYER_TO_TEAM, **overrides):
    """Build a CompletionCreate with a valid snapshot."""
    fields = {
        "match_type": match_type,
        "player_name": "Sam Carter",
        "team_name": "Riverside U12 Blues",
        "position": "Midfielder",
        "age_group": "U12",
        "league": "Riverside Junior League",
    }
    fields.update(overrides)
    return CompletionCreate(**fields)


def coach(user_id: str = "c1") -> Actor:
    return Actor(id=user_id, role=Role.COACH)


def player(user_id: str = "p1") -> Actor:
    return Actor(id=user_id, role=Role.PLAYER)


def parent(user_id: str = "pa1") -> Actor:
    return Actor(id=user_id, role=Role.PARENT)


def auth_headers(actor: Actor) -> dict:
    return {"X-User-Id": actor.id, "X-User-Role": actor.role.value}
