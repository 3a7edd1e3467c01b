"""
Standings calculation from decided matches.

Standings are always derived, never stored. Each team's decided matches are
first reduced to MatchResult records, then points and the format's tie-break
metric are computed from those records:

- Swiss: Buchholz (sum of opponents' current points)
- Group stage: goal difference (score for minus score against)
- Leaderboard and elimination formats: number of wins

Ordering is (points desc, tie-break desc, team name asc, team id asc), so the
same match set always produces the same ranking.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from bracketeer.bracket_core.scoring import STANDARD_SCORING, ScoringSystem
from bracketeer.bracket_core.structure import (
    BracketType,
    Match,
    MatchGraph,
    Standing,
    Team,
)


@dataclass(frozen=True)
class MatchResult:
    """The result of a single decided match for one team."""

    opponent_id: Optional[str]  # None for byes
    points: int
    won: bool = False
    drawn: bool = False
    score_for: int = 0
    score_against: int = 0
    is_bye: bool = False


@dataclass
class TeamRecord:
    team: Team
    results: List[MatchResult] = field(default_factory=list)

    @property
    def points(self) -> int:
        return sum(result.points for result in self.results)

    @property
    def wins(self) -> int:
        return sum(1 for result in self.results if result.won)

    @property
    def draws(self) -> int:
        return sum(1 for result in self.results if result.drawn)

    @property
    def losses(self) -> int:
        return sum(1 for result in self.results if not result.won and not result.drawn)

    @property
    def score_for(self) -> int:
        return sum(result.score_for for result in self.results)

    @property
    def score_against(self) -> int:
        return sum(result.score_against for result in self.results)


def calculate_buchholz(record: TeamRecord, records: Dict[str, TeamRecord]) -> float:
    """Sum of all opponents' points. Byes contribute nothing."""
    total = 0
    for result in record.results:
        if result.is_bye or result.opponent_id not in records:
            continue
        total += records[result.opponent_id].points
    return total


def calculate_goal_difference(record: TeamRecord, records: Dict[str, TeamRecord]) -> float:
    return record.score_for - record.score_against


def calculate_wins(record: TeamRecord, records: Dict[str, TeamRecord]) -> float:
    return record.wins


TIEBREAKS = {
    BracketType.SWISS: calculate_buchholz,
    BracketType.GROUP_STAGE: calculate_goal_difference,
    BracketType.LEADERBOARD: calculate_wins,
    BracketType.SINGLE_ELIMINATION: calculate_wins,
    BracketType.DOUBLE_ELIMINATION: calculate_wins,
}


def _record_match(
    match: Match,
    records: Dict[str, TeamRecord],
    bracket_type: BracketType,
    scoring: ScoringSystem,
) -> None:
    if match.is_bye:
        # Only Swiss byes are worth anything; knockout byes are just routing
        if bracket_type is BracketType.SWISS and match.winner is not None:
            record = records.get(match.winner.id)
            if record is not None:
                record.results.append(
                    MatchResult(opponent_id=None, points=scoring.bye_points, won=True, is_bye=True)
                )
        return

    for team in match.teams:
        record = records.get(team.id)
        if record is None:
            continue
        opponent = match.opponent_of(team.id)
        scored, conceded = match.score_for(team.id)
        won = match.winner is not None and match.winner.id == team.id
        record.results.append(
            MatchResult(
                opponent_id=opponent.id if opponent else None,
                points=scoring.points(won, draw=match.is_draw),
                won=won,
                drawn=match.is_draw,
                score_for=scored or 0,
                score_against=conceded or 0,
            )
        )


def compute_standings(
    graph: MatchGraph,
    bracket_name: Optional[str] = None,
    scoring: ScoringSystem = STANDARD_SCORING,
) -> List[Standing]:
    """Rank teams over the decided matches of one bracket, or of the whole graph."""
    if bracket_name is not None:
        bracket = graph.bracket(bracket_name)
        matches = bracket.matches
        if graph.bracket_type is BracketType.GROUP_STAGE:
            teams = bracket.teams
        else:
            teams = list(graph.teams)
    else:
        matches = graph.all_matches()
        teams = list(graph.teams)

    records = {team.id: TeamRecord(team=team) for team in teams}
    for match in matches:
        if match.is_decided:
            _record_match(match, records, graph.bracket_type, scoring)

    tiebreak = TIEBREAKS[graph.bracket_type]
    rows = []
    for record in records.values():
        rows.append((record, tiebreak(record, records)))
    rows.sort(key=lambda row: (-row[0].points, -row[1], row[0].team.name, row[0].team.id))

    return [
        Standing(
            rank=rank,
            team=record.team,
            points=record.points,
            played=len(record.results),
            wins=record.wins,
            draws=record.draws,
            losses=record.losses,
            tiebreak=value,
            score_for=record.score_for,
            score_against=record.score_against,
        )
        for rank, (record, value) in enumerate(rows, start=1)
    ]


def compute_group_standings(
    graph: MatchGraph, scoring: ScoringSystem = STANDARD_SCORING
) -> Dict[str, List[Standing]]:
    """Standings of every group, keyed by group name in group order."""
    return {
        bracket.name: compute_standings(graph, bracket.name, scoring)
        for bracket in graph.brackets
    }
