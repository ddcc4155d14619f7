from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from canastra.models.base import SnapshotModel, new_id


class MatchStatus(str, Enum):
    WAITING = "WAITING"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"


class Match(SnapshotModel):
    id: str = Field(default_factory=new_id)
    round_id: str
    team_one_id: str
    team_two_id: str
    team_one_score: int = 0
    team_two_score: int = 0
    status: MatchStatus = MatchStatus.WAITING

    # Result (set together, only while FINISHED)
    winner_id: Optional[str] = None
    loser_id: Optional[str] = None

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def involves(self, team_id: str) -> bool:
        return team_id in (self.team_one_id, self.team_two_id)
