from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotModel(BaseModel):
    """Base for every record stored inside the tournament snapshot.

    Attributes are snake_case in Python and camelCase in the persisted JSON.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
