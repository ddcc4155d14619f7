"""
Round Management API Routes
Create, advance, complete and delete rounds.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from canastra.dependencies import get_tournament_engine
from canastra.models.round import Round
from canastra.routes.responses import OperationResponse, raise_for_result
from canastra.services.tournament_engine import OperationResult, TournamentEngine

router = APIRouter()


class RoundOperationResponse(OperationResponse):
    round: Round
    bye_team_id: Optional[str] = None
    restored_team_ids: List[str] = Field(default_factory=list)


def _round_response(result: OperationResult) -> RoundOperationResponse:
    raise_for_result(result)
    return RoundOperationResponse(
        level=result.level,
        message=result.message,
        round=result.value,
        bye_team_id=result.details.get("bye_team_id"),
        restored_team_ids=result.details.get("restored_team_ids", []),
    )


@router.post("/rounds", response_model=RoundOperationResponse, status_code=201)
def create_round(engine: TournamentEngine = Depends(get_tournament_engine)):
    """Open an empty round numbered after the highest existing one."""
    return _round_response(engine.create_round())


@router.post("/rounds/advance", response_model=RoundOperationResponse, status_code=201)
def advance_round(engine: TournamentEngine = Depends(get_tournament_engine)):
    """
    Pair the current round's winners into a new round.

    409 when the current round has unfinished matches or fewer than two
    teams advance. An odd team out is reported as byeTeamId.
    """
    return _round_response(engine.advance_round())


@router.post("/rounds/{round_id}/complete", response_model=RoundOperationResponse)
def complete_round(round_id: str, engine: TournamentEngine = Depends(get_tournament_engine)):
    return _round_response(engine.complete_round(round_id))


@router.delete("/rounds/{round_id}", response_model=RoundOperationResponse)
def delete_round(round_id: str, engine: TournamentEngine = Depends(get_tournament_engine)):
    """Delete a round and its matches, giving back lives lost in it. Irreversible."""
    return _round_response(engine.delete_round(round_id))
