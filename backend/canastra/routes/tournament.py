"""
Tournament snapshot API Routes
Read-only views the UI renders from.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from canastra.dependencies import get_tournament_engine
from canastra.models.round import Round
from canastra.models.team import Team
from canastra.models.tournament import Tournament
from canastra.services.bracket_rules import active_teams, can_reregister, current_round, round_match_counts
from canastra.services.tournament_engine import TournamentEngine

router = APIRouter()


class TournamentStateResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tournament: Tournament
    loading: bool


class CurrentRoundResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    round: Optional[Round] = None
    total_matches: int = 0
    finished_matches: int = 0


@router.get("/tournament", response_model=TournamentStateResponse)
def get_tournament(engine: TournamentEngine = Depends(get_tournament_engine)):
    """Full snapshot plus the loading flag."""
    return TournamentStateResponse(tournament=engine.tournament, loading=engine.loading)


@router.get("/tournament/current-round", response_model=CurrentRoundResponse)
def get_current_round(engine: TournamentEngine = Depends(get_tournament_engine)):
    """The round numbered currentRoundNumber, with its progress counts."""
    rnd = current_round(engine.tournament)
    if rnd is None:
        return CurrentRoundResponse()
    total, finished = round_match_counts(rnd)
    return CurrentRoundResponse(round=rnd, total_matches=total, finished_matches=finished)


@router.get("/teams/active", response_model=List[Team])
def get_active_teams(engine: TournamentEngine = Depends(get_tournament_engine)):
    """Teams still in the bracket (not eliminated), roster order."""
    return active_teams(engine.tournament)


@router.get("/teams/reregistrable", response_model=List[Team])
def get_reregistrable_teams(engine: TournamentEngine = Depends(get_tournament_engine)):
    """Eliminated teams that may still come back (once, before round 5)."""
    tournament = engine.tournament
    return [t for t in tournament.teams if can_reregister(t, tournament.current_round_number)]
