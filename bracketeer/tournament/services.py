"""
Django backed collaborators for the bracket engine, and the shared engine instance.
"""

import threading

from django.conf import settings

from bracketeer.bracket_core.engine import BracketEngine
from bracketeer.bracket_core.interfaces import MatchGraphStore, TeamRegistry
from bracketeer.bracket_core.scoring import ScoringSystem
from bracketeer.tournament import db_to_structure, structure_to_db
from bracketeer.tournament.signals import SignalLiveUpdateSink


class DjangoTeamRegistry(TeamRegistry):
    def list_registered_teams(self, tournament_id):
        return db_to_structure.list_registered_teams(tournament_id)


class DjangoMatchGraphStore(MatchGraphStore):
    def has_match_graph(self, tournament_id):
        return db_to_structure.get_tournament(tournament_id).is_started

    def load_match_graph(self, tournament_id):
        return db_to_structure.load_match_graph(tournament_id)

    def save_graph(self, graph, status=None):
        structure_to_db.save_graph(graph, status=status)

    def save_match(self, tournament_id, match):
        structure_to_db.save_match(tournament_id, match)

    def save_matches(self, tournament_id, matches, revision=None, status=None):
        structure_to_db.save_matches(tournament_id, matches, revision=revision, status=status)

    def save_tournament_status(self, tournament_id, status):
        structure_to_db.save_tournament_status(tournament_id, status)


_engine = None
_engine_guard = threading.Lock()


def get_engine() -> BracketEngine:
    """The process-wide engine. All requests must share it for per-tournament locking to hold."""
    global _engine
    with _engine_guard:
        if _engine is None:
            _engine = BracketEngine(
                DjangoTeamRegistry(),
                DjangoMatchGraphStore(),
                SignalLiveUpdateSink(),
                scoring=ScoringSystem(**settings.BRACKETEER_SCORING),
                lock_timeout=settings.BRACKETEER_LOCK_TIMEOUT,
            )
        return _engine
