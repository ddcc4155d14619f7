# Force SQLModel table registration at test discovery time
# This ensures the snapshot table is registered before any test database creation
from canastra.models.snapshot import TournamentSnapshot  # noqa: F401
