"""
Structural repair of persisted tournament snapshots.

A snapshot written by an older build, edited by hand or truncated mid-write
may be missing arrays, carry wrong scalar types or break the bracket
invariants. repair_snapshot() coerces such a document into a valid
Tournament and reports every change it made, so the store can write the
repaired form back.

Rules:
- Missing or wrong-typed arrays become empty lists; non-object entries are dropped.
- Missing or wrong-typed scalars fall back to their defaults.
- Team lives are clamped at 0 and eliminated is re-derived from lives.
- Match results are kept only when the match is FINISHED with both winner and loser.
- Round numbers must be unique positive ints; offenders are renumbered after the highest.
- currentRoundNumber is reset to the highest round number.
"""
import json
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from canastra.config import DEFAULT_TOURNAMENT_NAME, INITIAL_LIVES
from canastra.errors import CorruptSnapshotError
from canastra.models.base import new_id, utcnow
from canastra.models.match import MatchStatus
from canastra.models.tournament import Tournament

_DATETIME = TypeAdapter(datetime)

# field -> (python type, default factory)
FieldSpec = Dict[str, Tuple[type, Callable[[], Any]]]

TOURNAMENT_FIELDS: FieldSpec = {
    "id": (str, new_id),
    "name": (str, lambda: DEFAULT_TOURNAMENT_NAME),
    "teams": (list, list),
    "rounds": (list, list),
}

TEAM_FIELDS: FieldSpec = {
    "id": (str, new_id),
    "name": (str, str),
    "players": (list, list),
    "lives": (int, lambda: INITIAL_LIVES),
    "eliminated": (bool, lambda: False),
    "reregistered": (bool, lambda: False),
}

PLAYER_FIELDS: FieldSpec = {
    "id": (str, new_id),
    "name": (str, str),
}

ROUND_FIELDS: FieldSpec = {
    "id": (str, new_id),
    "matches": (list, list),
    "completed": (bool, lambda: False),
    "byeTeamIds": (list, list),
}

MATCH_FIELDS: FieldSpec = {
    "id": (str, new_id),
    "teamOneId": (str, str),
    "teamTwoId": (str, str),
    "teamOneScore": (int, lambda: 0),
    "teamTwoScore": (int, lambda: 0),
}


def decode_snapshot(raw: str) -> Dict[str, Any]:
    """Parse stored JSON text; anything that is not a JSON object is corrupt."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise CorruptSnapshotError(f"snapshot is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise CorruptSnapshotError(f"snapshot root must be an object, got {type(data).__name__}")
    return data


def repair_snapshot(data: Dict[str, Any]) -> Tuple[Tournament, List[str]]:
    """
    Coerce a decoded snapshot into a valid Tournament.

    Returns:
        (tournament, repairs) where repairs lists every change made; empty
        when the document was already well formed.

    Raises:
        CorruptSnapshotError: if the coerced document still fails validation
    """
    repairs: List[str] = []
    doc = _coerce_fields(data, TOURNAMENT_FIELDS, "tournament", repairs)

    doc["teams"] = [_repair_team(t, i, repairs) for i, t in _objects(doc["teams"], "teams", repairs)]
    doc["rounds"] = [_repair_round(r, i, repairs) for i, r in _objects(doc["rounds"], "rounds", repairs)]
    _repair_round_numbers(doc["rounds"], repairs)

    highest = max((r["number"] for r in doc["rounds"]), default=0)
    if doc.get("currentRoundNumber") != highest:
        repairs.append(f"tournament.currentRoundNumber reset to {highest}")
        doc["currentRoundNumber"] = highest

    try:
        tournament = Tournament.model_validate(doc)
    except PydanticValidationError as exc:
        raise CorruptSnapshotError(f"snapshot failed validation after repair: {exc}") from exc
    return tournament, repairs


# ============================================================================
# Entity repair
# ============================================================================


def _repair_team(team: Dict[str, Any], index: int, repairs: List[str]) -> Dict[str, Any]:
    where = f"teams[{index}]"
    team = _coerce_fields(team, TEAM_FIELDS, where, repairs)

    players = []
    for i, player in enumerate(team["players"]):
        # Older documents stored players as bare names
        if isinstance(player, str):
            player = {"name": player}
            repairs.append(f"{where}.players[{i}] converted from name")
        if not isinstance(player, dict):
            repairs.append(f"{where}.players[{i}] dropped (not an object)")
            continue
        player = _coerce_fields(player, PLAYER_FIELDS, f"{where}.players[{i}]", repairs)
        _drop_invalid_optional(player, "contact", str, f"{where}.players[{i}]", repairs)
        players.append(player)
    team["players"] = players

    if team["lives"] < 0:
        repairs.append(f"{where}.lives clamped to 0")
        team["lives"] = 0
    eliminated = team["lives"] <= 0
    if team["eliminated"] != eliminated:
        repairs.append(f"{where}.eliminated set to {eliminated}")
        team["eliminated"] = eliminated
    return team


def _repair_round(rnd: Dict[str, Any], index: int, repairs: List[str]) -> Dict[str, Any]:
    where = f"rounds[{index}]"
    rnd = _coerce_fields(rnd, ROUND_FIELDS, where, repairs)

    if not _is_datetime(rnd.get("createdAt")):
        repairs.append(f"{where}.createdAt reset")
        rnd["createdAt"] = utcnow().isoformat()

    bye_ids = [t for t in rnd["byeTeamIds"] if isinstance(t, str)]
    if len(bye_ids) != len(rnd["byeTeamIds"]):
        repairs.append(f"{where}.byeTeamIds non-string entries dropped")
    rnd["byeTeamIds"] = bye_ids

    rnd["matches"] = [
        _repair_match(m, rnd["id"], f"{where}.matches[{i}]", repairs)
        for i, m in _objects(rnd["matches"], f"{where}.matches", repairs)
    ]
    return rnd


def _repair_match(match: Dict[str, Any], round_id: str, where: str, repairs: List[str]) -> Dict[str, Any]:
    match = _coerce_fields(match, MATCH_FIELDS, where, repairs)

    if match.get("roundId") != round_id:
        repairs.append(f"{where}.roundId set to containing round")
        match["roundId"] = round_id

    valid_statuses = {s.value for s in MatchStatus}
    if match.get("status") not in valid_statuses:
        repairs.append(f"{where}.status reset to {MatchStatus.WAITING.value}")
        match["status"] = MatchStatus.WAITING.value

    for key in ("winnerId", "loserId"):
        _drop_invalid_optional(match, key, str, where, repairs)
    has_result = bool(match.get("winnerId")) and bool(match.get("loserId"))
    if (match.get("winnerId") or match.get("loserId")) and not (
        has_result and match["status"] == MatchStatus.FINISHED.value
    ):
        repairs.append(f"{where} partial or stale result cleared")
        match.pop("winnerId", None)
        match.pop("loserId", None)

    for key in ("startTime", "endTime"):
        if key in match and match[key] is not None and not _is_datetime(match[key]):
            repairs.append(f"{where}.{key} dropped (not a date)")
            del match[key]
    return match


def _repair_round_numbers(rounds: List[Dict[str, Any]], repairs: List[str]) -> None:
    seen = set()
    valid = [
        r.get("number") for r in rounds if _is_kind(r.get("number"), int) and r["number"] > 0
    ]
    next_number = max(valid, default=0) + 1
    for index, rnd in enumerate(rounds):
        number = rnd.get("number")
        if not _is_kind(number, int) or number <= 0 or number in seen:
            repairs.append(f"rounds[{index}].number renumbered to {next_number}")
            rnd["number"] = next_number
            next_number += 1
        seen.add(rnd["number"])


# ============================================================================
# Helpers
# ============================================================================


def _objects(items: List[Any], where: str, repairs: List[str]):
    for index, item in enumerate(items):
        if isinstance(item, dict):
            yield index, item
        else:
            repairs.append(f"{where}[{index}] dropped (not an object)")


def _coerce_fields(data: Dict[str, Any], fields: FieldSpec, where: str, repairs: List[str]) -> Dict[str, Any]:
    out = dict(data)
    for key, (kind, default) in fields.items():
        if key not in out:
            repairs.append(f"{where}.{key} missing")
            out[key] = default()
        elif not _is_kind(out[key], kind):
            repairs.append(f"{where}.{key} invalid ({type(out[key]).__name__})")
            out[key] = default()
    return out


def _drop_invalid_optional(data: Dict[str, Any], key: str, kind: type, where: str, repairs: List[str]) -> None:
    if key in data and data[key] is not None and not _is_kind(data[key], kind):
        repairs.append(f"{where}.{key} dropped ({type(data[key]).__name__})")
        del data[key]


def _is_kind(value: Any, kind: type) -> bool:
    # bool is an int subclass; never accept it for int fields
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, kind)


def _is_datetime(value: Optional[Any]) -> bool:
    if not isinstance(value, str):
        return False
    try:
        _DATETIME.validate_python(value)
    except PydanticValidationError:
        return False
    return True
