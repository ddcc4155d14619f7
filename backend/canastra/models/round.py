from datetime import datetime
from typing import List

from pydantic import Field

from canastra.models.base import SnapshotModel, new_id, utcnow
from canastra.models.match import Match


class Round(SnapshotModel):
    id: str = Field(default_factory=new_id)
    number: int
    matches: List[Match] = Field(default_factory=list)
    completed: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    # Teams carried into this round without a match (odd winner count on advance)
    bye_team_ids: List[str] = Field(default_factory=list)
