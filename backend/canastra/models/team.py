from typing import List, Optional

from pydantic import Field

from canastra.config import INITIAL_LIVES
from canastra.models.base import SnapshotModel, new_id


class Player(SnapshotModel):
    id: str = Field(default_factory=new_id)
    name: str
    contact: Optional[str] = None


class Team(SnapshotModel):
    """A dupla: two players entered in the bracket as one team."""

    id: str = Field(default_factory=new_id)
    name: str
    players: List[Player] = Field(default_factory=list)
    lives: int = INITIAL_LIVES
    eliminated: bool = False
    reregistered: bool = False
