"""
Bracket rules: pure functions over the tournament entities.

Nothing here mutates its inputs. Functions that change teams return a new
list with the affected team replaced by an updated copy.
"""
from typing import List, Optional, Tuple

from canastra.config import REREGISTRATION_ROUND_CUTOFF, WIN_THRESHOLD
from canastra.models.match import Match, MatchStatus
from canastra.models.round import Round
from canastra.models.team import Team
from canastra.models.tournament import Tournament


def determine_outcome(match: Match) -> Tuple[str, str]:
    """
    Return (winner_id, loser_id) for a match from its scores.

    Rules, in order:
    1. Team one at or above WIN_THRESHOLD wins.
    2. Team two at or above WIN_THRESHOLD wins.
    3. Otherwise the higher score wins; equal scores go to team one.
    """
    one, two = match.team_one_score, match.team_two_score

    if one >= WIN_THRESHOLD:
        winner_id = match.team_one_id
    elif two >= WIN_THRESHOLD:
        winner_id = match.team_two_id
    elif two > one:
        winner_id = match.team_two_id
    else:
        winner_id = match.team_one_id

    loser_id = match.team_two_id if winner_id == match.team_one_id else match.team_one_id
    return winner_id, loser_id


def apply_loss(teams: List[Team], loser_id: str) -> List[Team]:
    """Take one life from the loser; eliminated once lives reach zero."""
    updated = []
    for team in teams:
        if team.id == loser_id:
            lives = max(team.lives - 1, 0)
            team = team.model_copy(update={"lives": lives, "eliminated": lives <= 0})
        updated.append(team)
    return updated


def restore_life(teams: List[Team], team_id: str) -> List[Team]:
    """Give one life back to a team (undo of apply_loss)."""
    updated = []
    for team in teams:
        if team.id == team_id:
            lives = team.lives + 1
            team = team.model_copy(update={"lives": lives, "eliminated": lives <= 0})
        updated.append(team)
    return updated


def is_team_available(team_id: str, round_id: str, tournament: Tournament) -> bool:
    """False iff the team already plays in some match of the round."""
    rnd = find_round(tournament, round_id)
    if rnd is None:
        return True
    return not any(m.involves(team_id) for m in rnd.matches)


def is_round_complete(rnd: Round) -> bool:
    return bool(rnd.matches) and all(m.status == MatchStatus.FINISHED for m in rnd.matches)


def round_winners(rnd: Round) -> List[str]:
    return [m.winner_id for m in rnd.matches if m.status == MatchStatus.FINISHED and m.winner_id]


def advancing_teams(rnd: Round, tournament: Tournament) -> List[str]:
    """
    Winners of the round followed by teams that reached it on a bye.

    A bye only carries over while the team sat the round out and is still
    on the roster; once it plays a match there, that result decides.
    """
    winners = round_winners(rnd)
    roster = {t.id for t in tournament.teams}
    byes = [
        t
        for t in rnd.bye_team_ids
        if t in roster and t not in winners and not any(m.involves(t) for m in rnd.matches)
    ]
    return winners + byes


def pair_sequentially(team_ids: List[str]) -> Tuple[List[Tuple[str, str]], Optional[str]]:
    """
    Pair (0,1), (2,3), ... in order.

    Returns the pairs and the unpaired last entry when the count is odd.
    """
    pairs = [(team_ids[i], team_ids[i + 1]) for i in range(0, len(team_ids) - 1, 2)]
    leftover = team_ids[-1] if len(team_ids) % 2 == 1 else None
    return pairs, leftover


def next_round_number(rounds: List[Round]) -> int:
    return max((r.number for r in rounds), default=0) + 1


def can_reregister(team: Team, current_round_number: int) -> bool:
    """Whether an eliminated team may re-enter with reduced lives."""
    return team.eliminated and not team.reregistered and current_round_number < REREGISTRATION_ROUND_CUTOFF


def active_teams(tournament: Tournament) -> List[Team]:
    return [t for t in tournament.teams if not t.eliminated]


def round_match_counts(rnd: Round) -> Tuple[int, int]:
    """(total, finished) match counts for a round."""
    finished = sum(1 for m in rnd.matches if m.status == MatchStatus.FINISHED)
    return len(rnd.matches), finished


# ============================================================================
# Lookups
# ============================================================================


def find_team(tournament: Tournament, team_id: str) -> Optional[Team]:
    return next((t for t in tournament.teams if t.id == team_id), None)


def find_round(tournament: Tournament, round_id: str) -> Optional[Round]:
    return next((r for r in tournament.rounds if r.id == round_id), None)


def find_match(tournament: Tournament, match_id: str) -> Tuple[Optional[Round], Optional[Match]]:
    """Locate a match and the round holding it."""
    for rnd in tournament.rounds:
        for match in rnd.matches:
            if match.id == match_id:
                return rnd, match
    return None, None


def current_round(tournament: Tournament) -> Optional[Round]:
    return next((r for r in tournament.rounds if r.number == tournament.current_round_number), None)
