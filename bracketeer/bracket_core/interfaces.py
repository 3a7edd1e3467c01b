"""
Narrow interfaces to the collaborators the engine does not own.

- TeamRegistry: who is registered for a tournament
- MatchGraphStore: persistence of the match graph and tournament status
- LiveUpdateSink: fire-and-forget change notifications

The Django app provides ORM and signal backed implementations; memory.py
provides in-process ones for tests and scripts.

Stores keep a revision number per tournament. A graph remembers the revision
it was loaded at and every save checks it, so a writer holding a stale
snapshot gets StateConflict instead of overwriting newer results.
"""

from typing import Iterable, List, Optional

from bracketeer.bracket_core.structure import Match, MatchGraph, Team, TournamentStatus


class TeamRegistry:
    def list_registered_teams(self, tournament_id: str) -> List[Team]:
        """Teams in registration order. Raises NotFound for unknown tournaments."""
        raise NotImplementedError


class MatchGraphStore:
    def has_match_graph(self, tournament_id: str) -> bool:
        raise NotImplementedError

    def load_match_graph(self, tournament_id: str) -> MatchGraph:
        """A snapshot the caller owns and may mutate. Raises NotFound when there is no graph."""
        raise NotImplementedError

    def save_graph(self, graph: MatchGraph, status: Optional[TournamentStatus] = None) -> None:
        """Replace the whole stored graph, and the status when given, as one unit.

        Raises StateConflict when the stored revision is no longer
        graph.revision. On success graph.revision is the new stored revision.
        """
        raise NotImplementedError

    def save_match(self, tournament_id: str, match: Match) -> None:
        """Update the results and slots of a stored match. Raises NotFound for unknown matches."""
        self.save_matches(tournament_id, [match])

    def save_matches(
        self,
        tournament_id: str,
        matches: Iterable[Match],
        revision: Optional[int] = None,
        status: Optional[TournamentStatus] = None,
    ) -> None:
        """Update several matches, and the status when given, as one unit.

        Raises StateConflict when `revision` is given and the stored graph has
        moved past it, or when a stored result or placement would be replaced.
        """
        raise NotImplementedError

    def save_tournament_status(self, tournament_id: str, status: TournamentStatus) -> None:
        raise NotImplementedError


class LiveUpdateSink:
    def emit_match_update(self, tournament_id: str, match_id: int) -> None:
        raise NotImplementedError

    def emit_bracket_update(self, tournament_id: str) -> None:
        raise NotImplementedError
