"""
Bracket engine service.

BracketEngine is the single entry point that mutates tournaments. Every
mutation for a tournament runs under that tournament's lock:

    load a private snapshot -> validate and mutate it -> persist -> notify

A request that raises never reaches persistence, so the stored graph is left
exactly as it was. Different tournaments use different locks and never wait
on each other.

The lock only covers this process. Saves also carry the revision the
snapshot was loaded at and the store rejects stale ones with StateConflict,
so writers in other processes cannot overwrite newer results.
"""

import logging
import threading
import weakref
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

from bracketeer.bracket_core import advancement, leaderboard, swiss
from bracketeer.bracket_core.advancement import AdvancementInfo
from bracketeer.bracket_core.exceptions import StateConflict, ValidationError
from bracketeer.bracket_core.interfaces import LiveUpdateSink, MatchGraphStore, TeamRegistry
from bracketeer.bracket_core.scoring import STANDARD_SCORING, ScoringSystem
from bracketeer.bracket_core.standings import compute_group_standings, compute_standings
from bracketeer.bracket_core.structure import (
    BracketType,
    Match,
    MatchGraph,
    Round,
    Standing,
    TournamentStatus,
)
from bracketeer.bracket_core.topology import create_match_graph

logger = logging.getLogger(__name__)


@dataclass
class ResultReport:
    match: Match
    tournament_completed: bool
    advancement_info: AdvancementInfo

    def to_dict(self) -> Dict:
        return {
            "match": self.match.to_dict(),
            "tournamentCompleted": self.tournament_completed,
            "advancementInfo": self.advancement_info.to_dict(),
        }


class _TournamentLock:
    """Weakly referenceable holder for one tournament's mutex."""

    def __init__(self):
        self.mutex = threading.Lock()


class BracketEngine:
    def __init__(
        self,
        registry: TeamRegistry,
        store: MatchGraphStore,
        sink: LiveUpdateSink,
        scoring: ScoringSystem = STANDARD_SCORING,
        lock_timeout: float = 5.0,
    ):
        self.registry = registry
        self.store = store
        self.sink = sink
        self.scoring = scoring
        self.lock_timeout = lock_timeout
        self._locks: "weakref.WeakValueDictionary[str, _TournamentLock]" = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    # Locking

    def _lock_for(self, tournament_id: str) -> _TournamentLock:
        # Entries vanish once no request holds or waits on the lock.
        with self._locks_guard:
            lock = self._locks.get(tournament_id)
            if lock is None:
                lock = _TournamentLock()
                self._locks[tournament_id] = lock
            return lock

    @contextmanager
    def exclusive(self, tournament_id: str):
        """Serialize mutations of one tournament. Fails fast instead of queueing forever."""
        lock = self._lock_for(tournament_id)
        if not lock.mutex.acquire(timeout=self.lock_timeout):
            raise StateConflict(
                f"Tournament {tournament_id} is busy with another update, try again"
            )
        try:
            yield
        finally:
            lock.mutex.release()

    # Helpers

    def _load(self, tournament_id: str) -> MatchGraph:
        graph = self.store.load_match_graph(tournament_id)
        graph.rebuild_statuses()
        return graph

    def _emit_match_updates(self, tournament_id: str, match_ids: Iterable[int]) -> None:
        for match_id in match_ids:
            try:
                self.sink.emit_match_update(tournament_id, match_id)
            except Exception:
                logger.exception(
                    "Failed to emit update for match %s of tournament %s",
                    match_id,
                    tournament_id,
                )

    def _emit_bracket_update(self, tournament_id: str) -> None:
        try:
            self.sink.emit_bracket_update(tournament_id)
        except Exception:
            logger.exception("Failed to emit bracket update for tournament %s", tournament_id)

    @staticmethod
    def _status_of(graph: MatchGraph) -> TournamentStatus:
        if advancement.is_complete(graph):
            return TournamentStatus.COMPLETED
        return TournamentStatus.IN_PROGRESS

    # Operations

    def start_tournament(
        self,
        tournament_id: str,
        bracket_type: Union[BracketType, str],
        max_teams: int,
        shuffle: bool = False,
        seed: Optional[int] = None,
    ) -> MatchGraph:
        """Build the match graph from the registered teams and open the tournament."""
        with self.exclusive(tournament_id):
            if self.store.has_match_graph(tournament_id):
                raise StateConflict(f"Tournament {tournament_id} has already started")

            teams = self.registry.list_registered_teams(tournament_id)
            graph = create_match_graph(
                tournament_id, bracket_type, teams, max_teams, shuffle=shuffle, seed=seed
            )
            self.store.save_graph(graph, status=TournamentStatus.IN_PROGRESS)

        logger.info(
            "Started %s tournament %s with %s teams",
            graph.bracket_type.value,
            tournament_id,
            len(teams),
        )
        self._emit_bracket_update(tournament_id)
        return graph

    def report_result(
        self,
        tournament_id: str,
        match_id: int,
        score1: Optional[int],
        score2: Optional[int],
        winner_id: Optional[str],
    ) -> ResultReport:
        with self.exclusive(tournament_id):
            working = self._load(tournament_id)
            info = advancement.report_result(working, match_id, score1, score2, winner_id)
            self.store.save_matches(
                tournament_id,
                [working.get_match(mid) for mid in info.touched_match_ids],
                revision=working.revision,
                status=TournamentStatus.COMPLETED if info.tournament_completed else None,
            )

        self._emit_match_updates(tournament_id, info.touched_match_ids)
        if info.bracket_changed:
            self._emit_bracket_update(tournament_id)

        return ResultReport(
            match=working.get_match(match_id),
            tournament_completed=info.tournament_completed,
            advancement_info=info,
        )

    def generate_next_swiss_round(self, tournament_id: str) -> Round:
        with self.exclusive(tournament_id):
            working = self._load(tournament_id)
            new_round = swiss.generate_next_swiss_round(working, self.scoring)
            self.store.save_graph(working, status=self._status_of(working))

        self._emit_match_updates(tournament_id, [m.id for m in new_round.matches])
        self._emit_bracket_update(tournament_id)
        return new_round

    def record_leaderboard_result(
        self,
        tournament_id: str,
        team1_id: str,
        team2_id: str,
        score1: Optional[int],
        score2: Optional[int],
        winner_id: Optional[str],
    ) -> Match:
        with self.exclusive(tournament_id):
            working = self._load(tournament_id)
            match = leaderboard.record_leaderboard_result(
                working, team1_id, team2_id, score1, score2, winner_id
            )
            self.store.save_graph(working)

        self._emit_match_updates(tournament_id, [match.id])
        self._emit_bracket_update(tournament_id)
        return match

    def finish_tournament(self, tournament_id: str) -> MatchGraph:
        """Close a leaderboard. Other formats complete on their own."""
        with self.exclusive(tournament_id):
            working = self._load(tournament_id)
            if working.bracket_type is not BracketType.LEADERBOARD:
                raise ValidationError(
                    "Only leaderboard tournaments are finished manually; "
                    f"{working.bracket_type.value} completes with its last result"
                )
            leaderboard.finish_leaderboard(working)
            self.store.save_graph(working, status=TournamentStatus.COMPLETED)

        self._emit_bracket_update(tournament_id)
        return working

    def reset_bracket(self, tournament_id: str) -> MatchGraph:
        """Discard every result, keeping the first-round assignment."""
        with self.exclusive(tournament_id):
            working = self._load(tournament_id)
            advancement.reset_bracket(working)
            self.store.save_graph(working, status=self._status_of(working))

        self._emit_bracket_update(tournament_id)
        return working

    # Reads

    def bracket(self, tournament_id: str) -> MatchGraph:
        return self._load(tournament_id)

    def standings(self, tournament_id: str, bracket_name: Optional[str] = None) -> List[Standing]:
        return compute_standings(self._load(tournament_id), bracket_name, self.scoring)

    def group_standings(self, tournament_id: str) -> Dict[str, List[Standing]]:
        graph = self._load(tournament_id)
        if graph.bracket_type is not BracketType.GROUP_STAGE:
            raise ValidationError(f"Tournament {tournament_id} is not a group stage")
        return compute_group_standings(graph, self.scoring)
