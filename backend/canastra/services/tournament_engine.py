"""
Tournament state engine.

Owns the canonical Tournament snapshot and exposes every bracket mutation.
Each operation:
- runs under the engine lock (one writer at a time)
- works on a deep copy of the snapshot
- replaces and saves the snapshot only when it succeeds

Expected rejections (unknown ids, self-match, incomplete round, ...) never
raise out of the engine; they come back as a failed OperationResult and the
snapshot is left untouched.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from canastra.config import REREGISTRATION_LIVES, REREGISTRATION_ROUND_CUTOFF
from canastra.errors import (
    AdvancementWarning,
    NotFoundError,
    TournamentError,
    TournamentPreconditionError,
    TournamentValidationError,
)
from canastra.models.base import utcnow
from canastra.models.match import Match, MatchStatus
from canastra.models.round import Round
from canastra.models.team import Player, Team
from canastra.models.tournament import Tournament
from canastra.services.bracket_rules import (
    advancing_teams,
    apply_loss,
    current_round,
    determine_outcome,
    find_match,
    find_round,
    find_team,
    is_round_complete,
    is_team_available,
    next_round_number,
    pair_sequentially,
    restore_life,
)
from canastra.services.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

LEVEL_SUCCESS = "success"
LEVEL_WARNING = "warning"
LEVEL_ERROR = "error"

MISSING_TEAM_LABEL = "team not found"


@dataclass
class OperationResult:
    ok: bool
    message: str
    level: str = LEVEL_SUCCESS
    value: Any = None
    error: Optional[TournamentError] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class _Applied:
    message: str
    value: Any = None
    details: Dict[str, Any] = field(default_factory=dict)
    changed: bool = True


class TournamentEngine:
    def __init__(self, store: SnapshotStore):
        self.store = store
        self.loading = True
        self._lock = threading.RLock()
        self._tournament = Tournament()
        self.reload()

    @property
    def tournament(self) -> Tournament:
        return self._tournament

    def reload(self) -> None:
        """(Re)load the snapshot from the store."""
        with self._lock:
            self.loading = True
            try:
                self._tournament = self.store.load()
            finally:
                self.loading = False

    # ========================================================================
    # Teams
    # ========================================================================

    def add_team(self, name: str, players: List[Player]) -> OperationResult:
        return self._run("add_team", lambda t: self._add_team(t, name, players))

    def update_team(self, team: Team) -> OperationResult:
        return self._run("update_team", lambda t: self._update_team(t, team))

    def delete_team(self, team_id: str) -> OperationResult:
        return self._run("delete_team", lambda t: self._delete_team(t, team_id))

    def reregister_team(self, team_id: str) -> OperationResult:
        return self._run("reregister_team", lambda t: self._reregister_team(t, team_id))

    # ========================================================================
    # Rounds
    # ========================================================================

    def create_round(self) -> OperationResult:
        return self._run("create_round", self._create_round)

    def complete_round(self, round_id: str) -> OperationResult:
        return self._run("complete_round", lambda t: self._complete_round(t, round_id))

    def advance_round(self) -> OperationResult:
        return self._run("advance_round", self._advance_round)

    def delete_round(self, round_id: str) -> OperationResult:
        return self._run("delete_round", lambda t: self._delete_round(t, round_id))

    # ========================================================================
    # Matches
    # ========================================================================

    def create_match(self, team_one_id: str, team_two_id: str, round_id: str) -> OperationResult:
        return self._run("create_match", lambda t: self._create_match(t, team_one_id, team_two_id, round_id))

    def update_match_status(self, match_id: str, status: MatchStatus) -> OperationResult:
        return self._run("update_match_status", lambda t: self._update_match_status(t, match_id, status))

    def update_match_score(self, match_id: str, team_one_score: int, team_two_score: int) -> OperationResult:
        return self._run(
            "update_match_score", lambda t: self._update_match_score(t, match_id, team_one_score, team_two_score)
        )

    def finish_match(self, match_id: str, team_one_score: int, team_two_score: int) -> OperationResult:
        return self._run("finish_match", lambda t: self._finish_match(t, match_id, team_one_score, team_two_score))

    def reverse_match_result(self, match_id: str) -> OperationResult:
        return self._run("reverse_match_result", lambda t: self._reverse_match_result(t, match_id))

    def delete_match(self, match_id: str) -> OperationResult:
        return self._run("delete_match", lambda t: self._delete_match(t, match_id))

    # ========================================================================
    # Operation runner
    # ========================================================================

    def _run(self, action: str, apply: Callable[[Tournament], _Applied]) -> OperationResult:
        with self._lock:
            draft = self._tournament.model_copy(deep=True)
            try:
                applied = apply(draft)
            except TournamentError as exc:
                logger.warning("%s rejected: %s", action, exc.message)
                return OperationResult(ok=False, message=exc.message, level=exc.level, error=exc)

            if applied.changed:
                self.store.save(draft)
                self._tournament = draft
                logger.info("%s: %s", action, applied.message)

            value = applied.value
            if isinstance(value, BaseModel):
                value = value.model_copy(deep=True)
            return OperationResult(ok=True, message=applied.message, value=value, details=applied.details)

    # ========================================================================
    # Team operations
    # ========================================================================

    def _add_team(self, t: Tournament, name: str, players: List[Player]) -> _Applied:
        team = Team(name=name, players=[p.model_copy() for p in players])
        t.teams.append(team)
        return _Applied(f"Team {team.name} added", value=team)

    def _update_team(self, t: Tournament, updated: Team) -> _Applied:
        for index, team in enumerate(t.teams):
            if team.id == updated.id:
                lives = max(updated.lives, 0)
                t.teams[index] = updated.model_copy(deep=True, update={"lives": lives, "eliminated": lives <= 0})
                return _Applied(f"Team {updated.name} updated", value=t.teams[index])
        return _Applied(f"Team {updated.id} not in roster; nothing updated", changed=False)

    def _delete_team(self, t: Tournament, team_id: str) -> _Applied:
        team = self._require_team(t, team_id)
        # Matches keep their reference; they render as a missing-team placeholder
        t.teams = [x for x in t.teams if x.id != team_id]
        return _Applied(f"Team {team.name} removed", value=team)

    def _reregister_team(self, t: Tournament, team_id: str) -> _Applied:
        if t.current_round_number >= REREGISTRATION_ROUND_CUTOFF:
            raise TournamentPreconditionError(
                f"Teams cannot be reregistered once round {REREGISTRATION_ROUND_CUTOFF} has started"
            )
        team = self._require_team(t, team_id)
        team.lives = REREGISTRATION_LIVES
        team.eliminated = False
        team.reregistered = True
        return _Applied(f"Team {team.name} reregistered", value=team)

    # ========================================================================
    # Round operations
    # ========================================================================

    def _create_round(self, t: Tournament) -> _Applied:
        rnd = Round(number=next_round_number(t.rounds))
        t.rounds.append(rnd)
        t.current_round_number = rnd.number
        return _Applied(f"Round {rnd.number} created", value=rnd)

    def _complete_round(self, t: Tournament, round_id: str) -> _Applied:
        rnd = self._require_round(t, round_id)
        rnd.completed = True
        return _Applied(f"Round {rnd.number} completed", value=rnd)

    def _advance_round(self, t: Tournament) -> _Applied:
        previous = current_round(t)
        if previous is None:
            raise TournamentPreconditionError("There is no current round to advance")
        if not is_round_complete(previous):
            raise TournamentPreconditionError(
                f"Round {previous.number} still has unfinished matches (or none at all)"
            )

        advancing = advancing_teams(previous, t)
        if len(advancing) < 2:
            raise AdvancementWarning(
                f"Round {previous.number} has {len(advancing)} advancing team(s); at least 2 are needed"
            )

        rnd = Round(number=next_round_number(t.rounds))
        pairs, bye_team_id = pair_sequentially(advancing)
        rnd.matches = [Match(round_id=rnd.id, team_one_id=one, team_two_id=two) for one, two in pairs]
        if bye_team_id is not None:
            rnd.bye_team_ids.append(bye_team_id)

        t.rounds.append(rnd)
        t.current_round_number = rnd.number
        previous.completed = True

        message = f"Round {rnd.number} created with {len(pairs)} match(es)"
        if bye_team_id is not None:
            message += f"; {self._team_label(t, bye_team_id)} advances automatically"
        return _Applied(
            message,
            value=rnd,
            details={"previous_round_id": previous.id, "bye_team_id": bye_team_id},
        )

    def _delete_round(self, t: Tournament, round_id: str) -> _Applied:
        rnd = self._require_round(t, round_id)
        restored = []
        for match in rnd.matches:
            if match.status == MatchStatus.FINISHED and match.loser_id:
                t.teams = restore_life(t.teams, match.loser_id)
                restored.append(match.loser_id)

        t.rounds = [r for r in t.rounds if r.id != round_id]
        t.current_round_number = max((r.number for r in t.rounds), default=0)
        return _Applied(
            f"Round {rnd.number} deleted",
            value=rnd,
            details={"restored_team_ids": restored},
        )

    # ========================================================================
    # Match operations
    # ========================================================================

    def _create_match(self, t: Tournament, team_one_id: str, team_two_id: str, round_id: str) -> _Applied:
        if not team_one_id or not team_two_id:
            raise TournamentValidationError("Both teams must be selected")
        if team_one_id == team_two_id:
            raise TournamentValidationError("A team cannot play against itself")
        team_one = self._require_team(t, team_one_id)
        team_two = self._require_team(t, team_two_id)
        rnd = self._require_round(t, round_id)
        for team in (team_one, team_two):
            if not is_team_available(team.id, rnd.id, t):
                raise TournamentValidationError(f"Team {team.name} already has a match in round {rnd.number}")

        match = Match(round_id=rnd.id, team_one_id=team_one.id, team_two_id=team_two.id)
        rnd.matches.append(match)
        return _Applied(f"Match created: {team_one.name} vs {team_two.name}", value=match)

    def _update_match_status(self, t: Tournament, match_id: str, status: MatchStatus) -> _Applied:
        try:
            status = MatchStatus(status)
        except ValueError:
            raise TournamentValidationError(f"Invalid match status: {status}") from None
        _, match = self._require_match(t, match_id)
        if match.winner_id and status != MatchStatus.FINISHED:
            raise TournamentPreconditionError("Match has a recorded result; reverse it before changing status")

        match.status = status
        if status == MatchStatus.IN_PROGRESS:
            match.start_time = utcnow()
        return _Applied(f"Match status set to {status.value}", value=match)

    def _update_match_score(self, t: Tournament, match_id: str, one: int, two: int) -> _Applied:
        _, match = self._require_match(t, match_id)
        match.team_one_score = one
        match.team_two_score = two
        return _Applied(f"Score updated: {one} x {two}", value=match)

    def _finish_match(self, t: Tournament, match_id: str, one: int, two: int) -> _Applied:
        _, match = self._require_match(t, match_id)
        if match.status == MatchStatus.FINISHED and match.winner_id:
            raise TournamentPreconditionError("Match is already finished; reverse it before finishing again")

        match.team_one_score = one
        match.team_two_score = two
        winner_id, loser_id = determine_outcome(match)
        match.winner_id = winner_id
        match.loser_id = loser_id
        match.status = MatchStatus.FINISHED
        match.end_time = utcnow()
        t.teams = apply_loss(t.teams, loser_id)

        loser = find_team(t, loser_id)
        eliminated = loser is not None and loser.eliminated
        message = f"Match finished, winner: {self._team_label(t, winner_id)}"
        if eliminated:
            message += f"; {loser.name} eliminated"
        return _Applied(
            message,
            value=match,
            details={"winner_id": winner_id, "loser_id": loser_id, "eliminated": eliminated},
        )

    def _reverse_match_result(self, t: Tournament, match_id: str) -> _Applied:
        _, match = self._require_match(t, match_id)
        if match.status != MatchStatus.FINISHED or not match.winner_id or not match.loser_id:
            raise TournamentPreconditionError("Only a finished match can have its result reversed")

        loser_id = match.loser_id
        t.teams = restore_life(t.teams, loser_id)
        match.winner_id = None
        match.loser_id = None
        match.status = MatchStatus.IN_PROGRESS
        match.end_time = None
        return _Applied("Match result reversed", value=match, details={"restored_team_id": loser_id})

    def _delete_match(self, t: Tournament, match_id: str) -> _Applied:
        rnd, match = self._require_match(t, match_id)
        restored_team_id = None
        if match.status == MatchStatus.FINISHED and match.loser_id:
            t.teams = restore_life(t.teams, match.loser_id)
            restored_team_id = match.loser_id

        rnd.matches = [m for m in rnd.matches if m.id != match_id]
        return _Applied("Match deleted", value=match, details={"restored_team_id": restored_team_id})

    # ========================================================================
    # Lookups that reject unknown ids
    # ========================================================================

    @staticmethod
    def _require_team(t: Tournament, team_id: str) -> Team:
        team = find_team(t, team_id)
        if team is None:
            raise NotFoundError(f"Team {team_id} not found")
        return team

    @staticmethod
    def _require_round(t: Tournament, round_id: str) -> Round:
        rnd = find_round(t, round_id)
        if rnd is None:
            raise NotFoundError(f"Round {round_id} not found")
        return rnd

    @staticmethod
    def _require_match(t: Tournament, match_id: str):
        rnd, match = find_match(t, match_id)
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")
        return rnd, match

    @staticmethod
    def _team_label(t: Tournament, team_id: str) -> str:
        team = find_team(t, team_id)
        return team.name if team else MISSING_TEAM_LABEL
