"""
In-memory collaborators for tests, scripts and the management commands' dry runs.

Stored graphs are deep copies, so callers can never mutate stored state by
holding on to a returned object.
"""

import copy
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from bracketeer.bracket_core.exceptions import NotFound, StateConflict
from bracketeer.bracket_core.interfaces import LiveUpdateSink, MatchGraphStore, TeamRegistry
from bracketeer.bracket_core.structure import Match, MatchGraph, Team, TournamentStatus


class InMemoryTeamRegistry(TeamRegistry):
    def __init__(self, teams: Optional[Dict[str, List[Team]]] = None):
        self.teams = teams or {}

    def register(self, tournament_id: str, team: Team) -> None:
        self.teams.setdefault(tournament_id, []).append(team)

    def list_registered_teams(self, tournament_id: str) -> List[Team]:
        if tournament_id not in self.teams:
            raise NotFound(f"Tournament {tournament_id} not found")
        return list(self.teams[tournament_id])


class InMemoryMatchGraphStore(MatchGraphStore):
    def __init__(self):
        self.graphs: Dict[str, MatchGraph] = {}
        self.tournament_statuses: Dict[str, TournamentStatus] = {}
        self.saved_match_ids: List[Tuple[str, int]] = []
        self._lock = threading.Lock()

    def has_match_graph(self, tournament_id: str) -> bool:
        with self._lock:
            return tournament_id in self.graphs

    def load_match_graph(self, tournament_id: str) -> MatchGraph:
        with self._lock:
            if tournament_id not in self.graphs:
                raise NotFound(f"Tournament {tournament_id} has no bracket")
            return self.graphs[tournament_id].copy()

    def save_graph(self, graph: MatchGraph, status: Optional[TournamentStatus] = None) -> None:
        with self._lock:
            stored = self.graphs.get(graph.tournament_id)
            current = stored.revision if stored is not None else 0
            if graph.revision != current:
                raise StateConflict(
                    f"Tournament {graph.tournament_id} changed since it was loaded"
                )
            graph.revision = current + 1
            self.graphs[graph.tournament_id] = graph.copy()
            if status is not None:
                self.tournament_statuses[graph.tournament_id] = status

    def save_matches(
        self,
        tournament_id: str,
        matches: Iterable[Match],
        revision: Optional[int] = None,
        status: Optional[TournamentStatus] = None,
    ) -> None:
        matches = list(matches)
        with self._lock:
            stored = self.graphs.get(tournament_id)
            if stored is None:
                raise NotFound(f"Tournament {tournament_id} has no bracket")
            if revision is not None and revision != stored.revision:
                raise StateConflict(f"Tournament {tournament_id} changed since it was loaded")

            updated = stored.copy()
            for match in matches:
                self._replace_match(updated, copy.deepcopy(match))
            updated.revision += 1
            self.graphs[tournament_id] = updated
            self.saved_match_ids.extend((tournament_id, match.id) for match in matches)
            if status is not None:
                self.tournament_statuses[tournament_id] = status

    def save_tournament_status(self, tournament_id: str, status: TournamentStatus) -> None:
        with self._lock:
            self.tournament_statuses[tournament_id] = status

    @staticmethod
    def _replace_match(graph: MatchGraph, match: Match) -> None:
        for bracket in graph.brackets:
            for round in bracket.rounds:
                for index, existing in enumerate(round.matches):
                    if existing.id == match.id:
                        existing.check_overwrite(match)
                        round.matches[index] = match
                        graph.reindex()
                        return
        raise NotFound(f"Match {match.id} not found in tournament {graph.tournament_id}")


class RecordingLiveUpdateSink(LiveUpdateSink):
    """Remembers every notification in the order it was emitted."""

    def __init__(self):
        self.events: List[Tuple[str, str, Optional[int]]] = []

    def emit_match_update(self, tournament_id: str, match_id: int) -> None:
        self.events.append(("match", tournament_id, match_id))

    def emit_bracket_update(self, tournament_id: str) -> None:
        self.events.append(("bracket", tournament_id, None))

    def match_updates(self, tournament_id: str) -> List[int]:
        return [
            match_id
            for kind, tid, match_id in self.events
            if kind == "match" and tid == tournament_id
        ]

    def bracket_updates(self, tournament_id: str) -> int:
        return sum(1 for kind, tid, _ in self.events if kind == "bracket" and tid == tournament_id)
