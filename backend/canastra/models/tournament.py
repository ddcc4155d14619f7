from typing import List

from pydantic import Field

from canastra.config import DEFAULT_TOURNAMENT_NAME
from canastra.models.base import SnapshotModel, new_id
from canastra.models.round import Round
from canastra.models.team import Team


class Tournament(SnapshotModel):
    id: str = Field(default_factory=new_id)
    name: str = DEFAULT_TOURNAMENT_NAME
    teams: List[Team] = Field(default_factory=list)
    rounds: List[Round] = Field(default_factory=list)
    current_round_number: int = 0
