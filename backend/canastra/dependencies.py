import threading

from fastapi import Request

from canastra.database import engine, init_db
from canastra.services.snapshot_store import SnapshotStore
from canastra.services.tournament_engine import TournamentEngine

_engine_lock = threading.Lock()


def get_tournament_engine(request: Request) -> TournamentEngine:
    """The single TournamentEngine of this app, built on first use."""
    state = request.app.state
    with _engine_lock:
        if getattr(state, "tournament_engine", None) is None:
            init_db()
            state.tournament_engine = TournamentEngine(SnapshotStore(engine))
    return state.tournament_engine
