"""
Leaderboard tournaments.

No matches are generated up front. Results are recorded ad hoc between any
two registered teams and the tournament stays open until it is finished
explicitly.
"""

import logging
from typing import List, Optional

from bracketeer.bracket_core.advancement import validate_score
from bracketeer.bracket_core.exceptions import StateConflict, ValidationError
from bracketeer.bracket_core.structure import (
    LEADERBOARD_BRACKET,
    Bracket,
    BracketType,
    Match,
    MatchGraph,
    Round,
    Team,
)

logger = logging.getLogger(__name__)

RESULTS_ROUND_NAME = "Results"


def build_leaderboard(teams: List[Team], max_teams: int) -> List[Bracket]:
    return [Bracket(name=LEADERBOARD_BRACKET)]


def _ensure_leaderboard(graph: MatchGraph) -> Bracket:
    if graph.bracket_type is not BracketType.LEADERBOARD:
        raise ValidationError(f"Tournament {graph.tournament_id} is not a leaderboard")
    if graph.finished:
        raise StateConflict(f"Leaderboard {graph.tournament_id} is already finished")
    return graph.bracket(LEADERBOARD_BRACKET)


def record_leaderboard_result(
    graph: MatchGraph,
    team1_id: str,
    team2_id: str,
    score1: Optional[int],
    score2: Optional[int],
    winner_id: Optional[str],
) -> Match:
    """Append a decided ad hoc match. winner_id=None records a draw."""
    bracket = _ensure_leaderboard(graph)
    if team1_id == team2_id:
        raise ValidationError("A team cannot play itself")

    team1 = graph.team(team1_id)
    team2 = graph.team(team2_id)
    validate_score(score1, "score1")
    validate_score(score2, "score2")
    if winner_id is not None and winner_id not in (team1_id, team2_id):
        raise ValidationError(f"Winner {winner_id} did not play in this match")

    if not bracket.rounds:
        bracket.rounds.append(Round(number=1, name=RESULTS_ROUND_NAME))
    results = bracket.rounds[0]

    match = Match(
        id=graph.next_match_id(),
        round=1,
        match_number=len(results.matches),
        score1=score1,
        score2=score2,
    )
    match.slot1.fill(team1)
    match.slot2.fill(team2)
    if winner_id is None:
        match.is_draw = True
    else:
        match.winner = graph.team(winner_id)
    results.matches.append(match)

    logger.info(
        "Recorded leaderboard result %s in tournament %s", match, graph.tournament_id
    )
    return match


def finish_leaderboard(graph: MatchGraph) -> None:
    _ensure_leaderboard(graph)
    graph.finished = True
