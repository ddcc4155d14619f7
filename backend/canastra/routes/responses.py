"""Shared response envelope and result -> HTTP error mapping for the routers."""
from fastapi import HTTPException
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from canastra.errors import NotFoundError, TournamentPreconditionError
from canastra.services.tournament_engine import OperationResult


class OperationResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    level: str
    message: str


def raise_for_result(result: OperationResult) -> None:
    """Turn a failed engine result into an HTTPException."""
    if result.ok:
        return
    if isinstance(result.error, NotFoundError):
        raise HTTPException(status_code=404, detail=result.message)
    if isinstance(result.error, TournamentPreconditionError):
        raise HTTPException(status_code=409, detail=result.message)
    raise HTTPException(status_code=422, detail=result.message)
