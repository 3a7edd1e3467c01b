"""
Swiss system rounds.

Only the first round exists when the tournament starts. Every later round is
paired from the current standings once the previous round is fully decided:
teams are taken in standings order and matched with the closest-scored
opponent they have not met yet. Repeat pairings happen only when no
repeat-free pairing of the remaining teams exists.
"""

import logging
import math
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from bracketeer.bracket_core.exceptions import StateConflict, ValidationError
from bracketeer.bracket_core.scoring import STANDARD_SCORING, ScoringSystem
from bracketeer.bracket_core.standings import compute_standings
from bracketeer.bracket_core.structure import (
    SWISS_BRACKET,
    Bracket,
    BracketType,
    Match,
    MatchGraph,
    Round,
    Team,
)

logger = logging.getLogger(__name__)

MAX_SWISS_ROUNDS = 5


def swiss_round_count(team_count: int) -> int:
    """Planned number of rounds: min(5, ceil(log2(n)) + 2)."""
    if team_count < 2:
        return 0
    return min(MAX_SWISS_ROUNDS, math.ceil(math.log2(team_count)) + 2)


def swiss_round_name(number: int) -> str:
    return f"Round {number}"


def build_swiss(teams: List[Team], max_teams: int) -> List[Bracket]:
    """Swiss bracket holding an empty first round; the last team gets the bye when odd."""
    match_count = (len(teams) + 1) // 2
    matches = [Match(id=i + 1, round=1, match_number=i) for i in range(match_count)]
    first_round = Round(number=1, name=swiss_round_name(1), matches=matches)
    return [Bracket(name=SWISS_BRACKET, rounds=[first_round])]


def _pairing_history(bracket: Bracket) -> Tuple[Set[FrozenSet[str]], Set[str]]:
    met = set()
    had_bye = set()
    for match in bracket.matches:
        if match.is_bye:
            had_bye.update(team.id for team in match.teams)
        elif match.team1 is not None and match.team2 is not None:
            met.add(frozenset((match.team1.id, match.team2.id)))
    return met, had_bye


def _pick_bye(ordered: List[Team], had_bye: Set[str]) -> Team:
    """Lowest ranked team that has not had a bye yet."""
    for team in reversed(ordered):
        if team.id not in had_bye:
            return team
    return ordered[-1]


def _pair_without_repeats(
    ordered: List[Team], points: Dict[str, int], met: Set[FrozenSet[str]]
) -> Optional[List[Tuple[Team, Team]]]:
    if not ordered:
        return []

    first, rest = ordered[0], ordered[1:]
    candidates = sorted(
        enumerate(rest), key=lambda item: (abs(points[first.id] - points[item[1].id]), item[0])
    )
    for index, opponent in candidates:
        if frozenset((first.id, opponent.id)) in met:
            continue
        remaining = rest[:index] + rest[index + 1:]
        paired = _pair_without_repeats(remaining, points, met)
        if paired is not None:
            return [(first, opponent)] + paired
    return None


def pair_teams(
    ordered: List[Team], points: Dict[str, int], met: Set[FrozenSet[str]]
) -> List[Tuple[Team, Team]]:
    """Pair an even-sized standings-ordered team list."""
    pairs = _pair_without_repeats(ordered, points, met)
    if pairs is None:
        logger.warning("No repeat-free Swiss pairing exists, pairing adjacent teams")
        pairs = [(ordered[i], ordered[i + 1]) for i in range(0, len(ordered), 2)]
    return pairs


def generate_next_swiss_round(
    graph: MatchGraph, scoring: ScoringSystem = STANDARD_SCORING
) -> Round:
    """Pair and append the next Swiss round to the graph."""
    if graph.bracket_type is not BracketType.SWISS:
        raise ValidationError(f"Tournament {graph.tournament_id} is not a Swiss tournament")

    bracket = graph.bracket(SWISS_BRACKET)
    planned = swiss_round_count(len(graph.teams))
    if len(bracket.rounds) >= planned:
        raise StateConflict(f"All {planned} Swiss rounds have already been generated")

    current = bracket.rounds[-1]
    if not all(match.is_decided for match in current.matches):
        raise ValidationError(
            f"{current.name} must be fully decided before the next round is paired"
        )

    standings = compute_standings(graph, SWISS_BRACKET, scoring)
    ordered = [standing.team for standing in standings]
    points = {standing.team.id: standing.points for standing in standings}
    met, had_bye = _pairing_history(bracket)

    bye_team = None
    if len(ordered) % 2 == 1:
        bye_team = _pick_bye(ordered, had_bye)
        ordered = [team for team in ordered if team.id != bye_team.id]

    number = len(bracket.rounds) + 1
    next_id = graph.next_match_id()
    matches = []
    for match_number, (team1, team2) in enumerate(pair_teams(ordered, points, met)):
        match = Match(id=next_id + match_number, round=number, match_number=match_number)
        match.slot1.fill(team1)
        match.slot2.fill(team2)
        matches.append(match)

    if bye_team is not None:
        bye = Match(id=next_id + len(matches), round=number, match_number=len(matches))
        bye.slot1.fill(bye_team)
        bye.slot2.fill(None)
        bye.is_bye = True
        bye.winner = bye_team
        matches.append(bye)

    new_round = Round(number=number, name=swiss_round_name(number), matches=matches)
    bracket.rounds.append(new_round)
    logger.info(
        "Paired Swiss round %s of tournament %s (%s matches)",
        number,
        graph.tournament_id,
        len(matches),
    )
    return new_round
