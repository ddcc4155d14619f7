import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./canastra.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

# Key of the single persisted tournament document
SNAPSHOT_STORAGE_KEY = os.getenv("SNAPSHOT_STORAGE_KEY", "canastra-tournament")
DEFAULT_TOURNAMENT_NAME = os.getenv("TOURNAMENT_NAME", "Torneio de Canastra 2025")

CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    CORS_ORIGINS.extend(o.strip() for o in _extra.split(",") if o.strip())

# Game rules
WIN_THRESHOLD = 4000
INITIAL_LIVES = 2
REREGISTRATION_LIVES = 1
REREGISTRATION_ROUND_CUTOFF = 5  # reregistration closes once this round has been created
