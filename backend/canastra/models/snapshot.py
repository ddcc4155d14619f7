from datetime import datetime

from sqlmodel import Field, SQLModel

from canastra.models.base import utcnow


class TournamentSnapshot(SQLModel, table=True):
    """One serialized Tournament document per storage key (full overwrite on save)."""

    storage_key: str = Field(primary_key=True)
    payload_json: str  # Tournament as camelCase JSON
    updated_at: datetime = Field(default_factory=utcnow)
