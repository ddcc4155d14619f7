"""
Team Management API Routes
Roster operations: add, edit, remove and reregister duplas.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from canastra.config import INITIAL_LIVES
from canastra.dependencies import get_tournament_engine
from canastra.models.team import Player, Team
from canastra.routes.responses import OperationResponse, raise_for_result
from canastra.services.tournament_engine import TournamentEngine

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class PlayerRequest(BaseModel):
    id: Optional[str] = None
    name: str
    contact: Optional[str] = None

    def to_player(self) -> Player:
        if self.id:
            return Player(id=self.id, name=self.name, contact=self.contact)
        return Player(name=self.name, contact=self.contact)


class TeamCreateRequest(BaseModel):
    name: str
    players: List[PlayerRequest] = Field(default_factory=list, max_length=2)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()


class TeamUpdateRequest(TeamCreateRequest):
    lives: int = Field(default=INITIAL_LIVES, ge=0)
    reregistered: bool = False


class TeamOperationResponse(OperationResponse):
    team: Team


# ============================================================================
# Team Endpoints
# ============================================================================


@router.post("/teams", response_model=TeamOperationResponse, status_code=201)
def create_team(request: TeamCreateRequest, engine: TournamentEngine = Depends(get_tournament_engine)):
    """Add a team with full lives. Duplicate names are allowed."""
    result = engine.add_team(request.name, [p.to_player() for p in request.players])
    raise_for_result(result)
    return TeamOperationResponse(level=result.level, message=result.message, team=result.value)


@router.put("/teams/{team_id}", response_model=TeamOperationResponse)
def update_team(team_id: str, request: TeamUpdateRequest, engine: TournamentEngine = Depends(get_tournament_engine)):
    """Replace a team wholesale; eliminated follows from lives."""
    team = Team(
        id=team_id,
        name=request.name,
        players=[p.to_player() for p in request.players],
        lives=request.lives,
        reregistered=request.reregistered,
    )
    result = engine.update_team(team)
    raise_for_result(result)
    if result.value is None:
        raise HTTPException(status_code=404, detail="Team not found")
    return TeamOperationResponse(level=result.level, message=result.message, team=result.value)


@router.delete("/teams/{team_id}", status_code=204)
def delete_team(team_id: str, engine: TournamentEngine = Depends(get_tournament_engine)):
    """
    Remove a team from the roster.

    Matches that reference it are kept.
    """
    raise_for_result(engine.delete_team(team_id))
    return None


@router.post("/teams/{team_id}/reregister", response_model=TeamOperationResponse)
def reregister_team(team_id: str, engine: TournamentEngine = Depends(get_tournament_engine)):
    """Bring a team back with one life (closed from round 5 on)."""
    result = engine.reregister_team(team_id)
    raise_for_result(result)
    return TeamOperationResponse(level=result.level, message=result.message, team=result.value)
