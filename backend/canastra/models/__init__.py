from canastra.models.match import Match, MatchStatus
from canastra.models.round import Round
from canastra.models.snapshot import TournamentSnapshot
from canastra.models.team import Player, Team
from canastra.models.tournament import Tournament

__all__ = [
    "Tournament",
    "Round",
    "Match",
    "MatchStatus",
    "Team",
    "Player",
    "TournamentSnapshot",
]
