"""
Builder for creating match graphs with a fluent API.

This module lets tests and scripts describe a tournament by team names and
results instead of match ids:

    graph = (
        BracketBuilder()
        .teams("Alpha", "Bravo", "Charlie", "Delta")
        .single_elimination()
        .result("Alpha", "Bravo")
        .result("Delta", "Charlie")
        .build()
    )

Results are applied through the advancement engine, so a builder script
exercises exactly the code paths a live tournament does.
"""

from typing import Dict, List, Optional

from bracketeer.bracket_core import advancement, leaderboard, swiss
from bracketeer.bracket_core.scoring import STANDARD_SCORING, ScoringSystem
from bracketeer.bracket_core.structure import BracketType, Match, MatchGraph, MatchState, Team
from bracketeer.bracket_core.topology import create_match_graph


class BracketBuilder:
    """Builder for creating match graphs easily."""

    def __init__(self, tournament_id: str = "test-tournament", scoring: ScoringSystem = STANDARD_SCORING):
        self.tournament_id = tournament_id
        self.scoring = scoring
        self.name_to_id: Dict[str, str] = {}
        self._teams: List[Team] = []
        self._bracket_type: Optional[BracketType] = None
        self._max_teams: Optional[int] = None
        self._shuffle = False
        self._seed: Optional[int] = None
        self._graph: Optional[MatchGraph] = None

    # Entrants

    def team(self, name: str, team_id: Optional[str] = None) -> "BracketBuilder":
        """Register a team. Ids default to team-1, team-2, ... in registration order."""
        if team_id is None:
            team_id = f"team-{len(self._teams) + 1}"
        self._teams.append(Team(id=team_id, name=name))
        self.name_to_id[name] = team_id
        return self

    def teams(self, *names: str) -> "BracketBuilder":
        for name in names:
            self.team(name)
        return self

    def numbered_teams(self, count: int, prefix: str = "T") -> "BracketBuilder":
        """Register teams named T1..Tn."""
        return self.teams(*[f"{prefix}{i}" for i in range(1, count + 1)])

    # Format

    def format(self, bracket_type: BracketType, max_teams: Optional[int] = None) -> "BracketBuilder":
        self._bracket_type = bracket_type
        self._max_teams = max_teams
        return self

    def single_elimination(self, max_teams: Optional[int] = None) -> "BracketBuilder":
        return self.format(BracketType.SINGLE_ELIMINATION, max_teams)

    def double_elimination(self, max_teams: Optional[int] = None) -> "BracketBuilder":
        return self.format(BracketType.DOUBLE_ELIMINATION, max_teams)

    def swiss(self, max_teams: Optional[int] = None) -> "BracketBuilder":
        return self.format(BracketType.SWISS, max_teams)

    def group_stage(self, max_teams: Optional[int] = None) -> "BracketBuilder":
        return self.format(BracketType.GROUP_STAGE, max_teams)

    def leaderboard(self, max_teams: Optional[int] = None) -> "BracketBuilder":
        return self.format(BracketType.LEADERBOARD, max_teams)

    def shuffled(self, seed: int) -> "BracketBuilder":
        self._shuffle = True
        self._seed = seed
        return self

    # Results

    @property
    def graph(self) -> MatchGraph:
        """The graph under construction, created on first use."""
        if self._graph is None:
            if self._bracket_type is None:
                raise ValueError("Choose a format before adding results")
            self._graph = create_match_graph(
                self.tournament_id,
                self._bracket_type,
                self._teams,
                self._max_teams or len(self._teams),
                shuffle=self._shuffle,
                seed=self._seed,
            )
        return self._graph

    def _id(self, name: str) -> str:
        if name not in self.name_to_id:
            raise ValueError(f"Team '{name}' not registered")
        return self.name_to_id[name]

    def find_ready_match(self, first: str, second: Optional[str] = None) -> Match:
        """Lowest-id READY match involving the named team(s)."""
        first_id = self._id(first)
        second_id = self._id(second) if second else None
        for match in sorted(self.graph.all_matches(), key=lambda m: m.id):
            if match.state is not MatchState.READY or not match.has_team(first_id):
                continue
            if second_id is None or match.has_team(second_id):
                return match
        raise ValueError(f"No ready match for {first}" + (f" vs {second}" if second else ""))

    def result(
        self,
        winner: str,
        loser: Optional[str] = None,
        score1: Optional[int] = None,
        score2: Optional[int] = None,
    ) -> "BracketBuilder":
        """Report that `winner` beat `loser` (or its current opponent)."""
        match = self.find_ready_match(winner, loser)
        advancement.report_result(self.graph, match.id, score1, score2, self._id(winner))
        return self

    def score(self, team1: str, score1: int, team2: str, score2: int) -> "BracketBuilder":
        """Report a scored result; the higher score wins, equal scores draw."""
        match = self.find_ready_match(team1, team2)
        id1, id2 = self._id(team1), self._id(team2)
        if score1 == score2:
            winner_id = None
        else:
            winner_id = id1 if score1 > score2 else id2
        if match.team1.id != id1:
            score1, score2 = score2, score1
        advancement.report_result(self.graph, match.id, score1, score2, winner_id)
        return self

    def draw(self, team1: str, team2: str) -> "BracketBuilder":
        match = self.find_ready_match(team1, team2)
        advancement.report_result(self.graph, match.id, None, None, None)
        return self

    def next_swiss_round(self) -> "BracketBuilder":
        swiss.generate_next_swiss_round(self.graph, self.scoring)
        return self

    def leaderboard_result(
        self,
        team1: str,
        team2: str,
        winner: Optional[str] = None,
        score1: Optional[int] = None,
        score2: Optional[int] = None,
    ) -> "BracketBuilder":
        leaderboard.record_leaderboard_result(
            self.graph,
            self._id(team1),
            self._id(team2),
            score1,
            score2,
            self._id(winner) if winner else None,
        )
        return self

    def finish(self) -> "BracketBuilder":
        leaderboard.finish_leaderboard(self.graph)
        return self

    def build(self) -> MatchGraph:
        """Return the graph, with the builder's name mapping attached."""
        graph = self.graph
        graph.name_to_id = dict(self.name_to_id)
        return graph
