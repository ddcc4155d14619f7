from typing import Callable, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from canastra.dependencies import get_tournament_engine
from canastra.main import app
from canastra.models.team import Player, Team
from canastra.services.snapshot_store import SnapshotStore
from canastra.services.tournament_engine import TournamentEngine

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share the same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. Tables created and dropped per test (see db_engine fixture)
# 4. App dependency overridden to use an engine on test_engine (see client fixture)
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(name="db_engine")
def db_engine_fixture():
    """Fresh snapshot table for every test"""
    from canastra.models.snapshot import TournamentSnapshot  # noqa: F401

    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="store")
def store_fixture(db_engine):
    return SnapshotStore(db_engine, storage_key="test-tournament")


@pytest.fixture(name="engine")
def engine_fixture(store: SnapshotStore) -> TournamentEngine:
    return TournamentEngine(store)


@pytest.fixture(name="add_teams")
def add_teams_fixture(engine: TournamentEngine) -> Callable[..., List[Team]]:
    """Add one team per name (players '<name> 1' and '<name> 2'); returns the created teams."""

    def _add(*names: str) -> List[Team]:
        created = []
        for name in names:
            players = [Player(name=f"{name} 1"), Player(name=f"{name} 2")]
            result = engine.add_team(name, players)
            assert result.ok
            created.append(result.value)
        return created

    return _add


@pytest.fixture(name="client")
def client_fixture(engine: TournamentEngine):
    """Test client whose routes all share the test engine

    Override MUST be set BEFORE TestClient() and stay in place for the
    entire duration so the app never builds its own engine.
    """
    app.dependency_overrides[get_tournament_engine] = lambda: engine

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
