"""
Match API Routes
Pairing, live scoring, finishing and reversing matches.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from canastra.dependencies import get_tournament_engine
from canastra.models.match import Match, MatchStatus
from canastra.routes.responses import OperationResponse, raise_for_result
from canastra.services.tournament_engine import OperationResult, TournamentEngine

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MatchCreateRequest(_CamelRequest):
    team_one_id: str
    team_two_id: str


class MatchStatusUpdate(_CamelRequest):
    status: MatchStatus


class MatchScoreUpdate(_CamelRequest):
    team_one_score: int = Field(ge=0)
    team_two_score: int = Field(ge=0)


class MatchOperationResponse(OperationResponse):
    match: Match
    winner_id: Optional[str] = None
    loser_id: Optional[str] = None
    eliminated: bool = False
    restored_team_id: Optional[str] = None


def _match_response(result: OperationResult) -> MatchOperationResponse:
    raise_for_result(result)
    return MatchOperationResponse(
        level=result.level,
        message=result.message,
        match=result.value,
        winner_id=result.details.get("winner_id"),
        loser_id=result.details.get("loser_id"),
        eliminated=result.details.get("eliminated", False),
        restored_team_id=result.details.get("restored_team_id"),
    )


# ============================================================================
# Match Endpoints
# ============================================================================


@router.post("/rounds/{round_id}/matches", response_model=MatchOperationResponse, status_code=201)
def create_match(
    round_id: str,
    request: MatchCreateRequest,
    engine: TournamentEngine = Depends(get_tournament_engine),
):
    """Pair two teams in a round. Each team plays at most once per round."""
    return _match_response(engine.create_match(request.team_one_id, request.team_two_id, round_id))


@router.patch("/matches/{match_id}/status", response_model=MatchOperationResponse)
def update_match_status(
    match_id: str,
    request: MatchStatusUpdate,
    engine: TournamentEngine = Depends(get_tournament_engine),
):
    return _match_response(engine.update_match_status(match_id, request.status))


@router.patch("/matches/{match_id}/score", response_model=MatchOperationResponse)
def update_match_score(
    match_id: str,
    request: MatchScoreUpdate,
    engine: TournamentEngine = Depends(get_tournament_engine),
):
    """Live score entry; does not change status."""
    return _match_response(engine.update_match_score(match_id, request.team_one_score, request.team_two_score))


@router.post("/matches/{match_id}/finish", response_model=MatchOperationResponse)
def finish_match(
    match_id: str,
    request: MatchScoreUpdate,
    engine: TournamentEngine = Depends(get_tournament_engine),
):
    """Record final scores; the loser loses a life (eliminated flag reports a knock-out)."""
    return _match_response(engine.finish_match(match_id, request.team_one_score, request.team_two_score))


@router.post("/matches/{match_id}/reverse", response_model=MatchOperationResponse)
def reverse_match_result(match_id: str, engine: TournamentEngine = Depends(get_tournament_engine)):
    """Undo a finished result: the loser gets its life back, match returns to IN_PROGRESS."""
    return _match_response(engine.reverse_match_result(match_id))


@router.delete("/matches/{match_id}", response_model=MatchOperationResponse)
def delete_match(match_id: str, engine: TournamentEngine = Depends(get_tournament_engine)):
    return _match_response(engine.delete_match(match_id))
