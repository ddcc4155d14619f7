from pathlib import Path

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from canastra.config import DATABASE_URL, SQL_ECHO

_is_sqlite = DATABASE_URL.startswith("sqlite")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}

if _is_sqlite and ":memory:" not in DATABASE_URL:
    db_path = DATABASE_URL.replace("sqlite:///", "", 1)
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

engine: Engine = create_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    connect_args=_connect_args,
)


def init_db(db_engine: Engine = engine) -> None:
    """Initialize database - create all tables"""
    # Import all table models to ensure they're registered with SQLModel metadata
    from canastra.models.snapshot import TournamentSnapshot  # noqa: F401

    SQLModel.metadata.create_all(db_engine)
