"""
Fluent assertion interface for testing match graphs and standings.

    assert_bracket(graph).match(5).has_teams("T1", "T4").is_ready()
    assert_bracket(graph).team("T2").status(EntrantStatus.ELIMINATED).losses(1)
    assert_standings(graph).team("Alpha").rank(1).points(9)

Failures raise the built-in AssertionError so any test runner reports them.
"""

from typing import Dict, List, Optional

from bracketeer.bracket_core.advancement import is_complete
from bracketeer.bracket_core.exceptions import NotFound
from bracketeer.bracket_core.scoring import STANDARD_SCORING, ScoringSystem
from bracketeer.bracket_core.standings import compute_standings
from bracketeer.bracket_core.structure import (
    EntrantStatus,
    Match,
    MatchGraph,
    MatchState,
    Standing,
    Team,
)


def _find_team(graph: MatchGraph, name: str) -> Team:
    for team in graph.teams:
        if team.name == name:
            return team
    raise AssertionError(f"Team '{name}' not found in tournament")


def _describe(team: Optional[Team]) -> str:
    return team.name if team is not None else "nobody"


class BracketAssertion:
    """Fluent interface for asserting the state of a match graph."""

    def __init__(self, graph: MatchGraph):
        self.graph = graph

    def match(self, match_id: int) -> "MatchAssertion":
        try:
            match = self.graph.get_match(match_id)
        except NotFound:
            raise AssertionError(f"Match {match_id} not found in tournament")
        return MatchAssertion(self.graph, match)

    def team(self, name: str) -> "TeamAssertion":
        return TeamAssertion(self.graph, _find_team(self.graph, name))

    def completed(self, expected: bool = True) -> "BracketAssertion":
        actual = is_complete(self.graph)
        if actual != expected:
            raise AssertionError(
                f"Expected tournament completed={expected}, got {actual}"
            )
        return self

    def champion(self, name: str) -> "BracketAssertion":
        champion = self.graph.champion
        if champion is None or champion.name != name:
            raise AssertionError(f"Expected champion {name}, got {_describe(champion)}")
        return self

    def match_count(self, expected: int, bracket_name: Optional[str] = None) -> "BracketAssertion":
        if bracket_name is None:
            actual = len(self.graph.all_matches())
        else:
            actual = len(self.graph.matches_in(bracket_name))
        if actual != expected:
            where = f" in {bracket_name}" if bracket_name else ""
            raise AssertionError(f"Expected {expected} matches{where}, got {actual}")
        return self


class MatchAssertion(BracketAssertion):
    """Assertions for a specific match."""

    def __init__(self, graph: MatchGraph, match: Match):
        super().__init__(graph)
        self._match = match

    def has_teams(self, first: Optional[str], second: Optional[str]) -> "MatchAssertion":
        """Assert the exact occupants, slot1 then slot2 (None for no team)."""
        actual = (
            self._match.team1.name if self._match.team1 else None,
            self._match.team2.name if self._match.team2 else None,
        )
        if actual != (first, second):
            raise AssertionError(
                f"Match {self._match.id} expected teams {(first, second)}, got {actual}"
            )
        return self

    def state(self, expected: MatchState) -> "MatchAssertion":
        if self._match.state is not expected:
            raise AssertionError(
                f"Match {self._match.id} expected state {expected.value}, "
                f"got {self._match.state.value}"
            )
        return self

    def is_ready(self) -> "MatchAssertion":
        return self.state(MatchState.READY)

    def is_pending(self) -> "MatchAssertion":
        return self.state(MatchState.PENDING)

    def is_decided(self) -> "MatchAssertion":
        return self.state(MatchState.DECIDED)

    def winner(self, name: Optional[str]) -> "MatchAssertion":
        actual = self._match.winner.name if self._match.winner else None
        if actual != name:
            raise AssertionError(
                f"Match {self._match.id} expected winner {name}, got {actual}"
            )
        return self

    def is_bye(self, expected: bool = True) -> "MatchAssertion":
        if self._match.is_bye != expected:
            raise AssertionError(f"Match {self._match.id} expected is_bye={expected}")
        return self

    def is_draw(self, expected: bool = True) -> "MatchAssertion":
        if self._match.is_draw != expected:
            raise AssertionError(f"Match {self._match.id} expected is_draw={expected}")
        return self

    def feeds(self, match_id: Optional[int], slot: Optional[int] = None) -> "MatchAssertion":
        if self._match.next_match_id != match_id or (
            slot is not None and self._match.next_slot != slot
        ):
            raise AssertionError(
                f"Match {self._match.id} expected to feed match {match_id} slot {slot}, "
                f"got match {self._match.next_match_id} slot {self._match.next_slot}"
            )
        return self

    def drops_to(self, match_id: Optional[int], slot: Optional[int] = None) -> "MatchAssertion":
        if self._match.next_loser_match_id != match_id or (
            slot is not None and self._match.next_loser_slot != slot
        ):
            raise AssertionError(
                f"Match {self._match.id} expected loser to drop to match {match_id} slot {slot}, "
                f"got match {self._match.next_loser_match_id} slot {self._match.next_loser_slot}"
            )
        return self


class TeamAssertion(BracketAssertion):
    """Assertions for a specific team's progress."""

    def __init__(self, graph: MatchGraph, team: Team):
        super().__init__(graph)
        self._team = team

    def status(self, expected: EntrantStatus) -> "TeamAssertion":
        actual = self.graph.status_of(self._team.id)
        if actual is not expected:
            raise AssertionError(
                f"{self._team.name} expected status {expected.value}, got {actual.value}"
            )
        return self

    def losses(self, expected: int) -> "TeamAssertion":
        actual = len(self.graph.losses_of(self._team.id))
        if actual != expected:
            raise AssertionError(f"{self._team.name} expected {expected} losses, got {actual}")
        return self


class StandingsAssertion:
    """Fluent interface for asserting computed standings."""

    def __init__(
        self,
        graph: MatchGraph,
        bracket_name: Optional[str] = None,
        scoring: ScoringSystem = STANDARD_SCORING,
    ):
        self.graph = graph
        self.standings: List[Standing] = compute_standings(graph, bracket_name, scoring)
        self._by_name: Dict[str, Standing] = {s.team.name: s for s in self.standings}

    def team(self, name: str) -> "TeamStandingAssertion":
        if name not in self._by_name:
            raise AssertionError(f"Team '{name}' not found in standings")
        return TeamStandingAssertion(self, self._by_name[name])

    def order(self, *names: str) -> "StandingsAssertion":
        """Assert the leading teams of the ranking, in order."""
        actual = [s.team.name for s in self.standings[: len(names)]]
        if actual != list(names):
            raise AssertionError(f"Expected standings order {list(names)}, got {actual}")
        return self


class TeamStandingAssertion:
    def __init__(self, parent: StandingsAssertion, standing: Standing):
        self.parent = parent
        self.standing = standing

    def _check(self, field: str, expected) -> "TeamStandingAssertion":
        actual = getattr(self.standing, field)
        if actual != expected:
            raise AssertionError(
                f"{self.standing.team.name} expected {field} {expected}, got {actual}"
            )
        return self

    def rank(self, expected: int) -> "TeamStandingAssertion":
        return self._check("rank", expected)

    def points(self, expected: int) -> "TeamStandingAssertion":
        return self._check("points", expected)

    def played(self, expected: int) -> "TeamStandingAssertion":
        return self._check("played", expected)

    def wins(self, expected: int) -> "TeamStandingAssertion":
        return self._check("wins", expected)

    def draws(self, expected: int) -> "TeamStandingAssertion":
        return self._check("draws", expected)

    def losses(self, expected: int) -> "TeamStandingAssertion":
        return self._check("losses", expected)

    def tiebreak(self, expected: float) -> "TeamStandingAssertion":
        return self._check("tiebreak", expected)

    def team(self, name: str) -> "TeamStandingAssertion":
        return self.parent.team(name)


def assert_bracket(graph: MatchGraph) -> BracketAssertion:
    return BracketAssertion(graph)


def assert_standings(
    graph: MatchGraph,
    bracket_name: Optional[str] = None,
    scoring: ScoringSystem = STANDARD_SCORING,
) -> StandingsAssertion:
    return StandingsAssertion(graph, bracket_name, scoring)
