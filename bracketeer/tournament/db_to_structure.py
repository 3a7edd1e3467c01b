"""
Transform database models to bracket_core structure representation.

This module provides functions to convert the Django ORM rows of
bracketeer.tournament into the MatchGraph the engine works on. Entrant
statuses are never stored; they are rebuilt from the decided matches after
every load.
"""

from typing import Dict, List

from bracketeer.bracket_core.exceptions import NotFound
from bracketeer.bracket_core.structure import (
    LEADERBOARD_BRACKET,
    Bracket,
    BracketSide,
    BracketType,
    Match,
    MatchGraph,
    Round,
    Slot,
    Team,
    TournamentStatus,
)


def get_tournament(tournament_id, for_update=False):
    """Fetch the Tournament row for an engine tournament id.

    Args:
        tournament_id: The engine's tournament id (the row's primary key as a string)
        for_update: Lock the row until the surrounding transaction ends

    Raises:
        NotFound: If no tournament exists for the id
    """
    from bracketeer.tournament.models import Tournament

    queryset = Tournament.objects.all()
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=int(tournament_id))
    except (Tournament.DoesNotExist, TypeError, ValueError):
        raise NotFound(f"Tournament {tournament_id} not found")


def team_to_structure(team) -> Team:
    return Team(id=str(team.pk), name=team.name)


def list_registered_teams(tournament_id) -> List[Team]:
    """Registered teams in registration order."""
    tournament = get_tournament(tournament_id)
    return [team_to_structure(team) for team in tournament.teams.all()]


def _slot(team, is_bye: bool, source_match_id, source_outcome: str) -> Slot:
    return Slot(
        team=team,
        is_bye=is_bye,
        source_match_id=source_match_id,
        source_outcome=source_outcome or None,
    )


def match_to_structure(row, teams: Dict[int, Team]) -> Match:
    """Convert a Match row, resolving team foreign keys through `teams`."""
    return Match(
        id=row.match_id,
        round=row.round,
        match_number=row.match_number,
        bracket_side=BracketSide(row.bracket_side),
        slot1=_slot(teams.get(row.team1_id), row.slot1_is_bye,
                    row.slot1_source_match_id, row.slot1_source_outcome),
        slot2=_slot(teams.get(row.team2_id), row.slot2_is_bye,
                    row.slot2_source_match_id, row.slot2_source_outcome),
        score1=row.score1,
        score2=row.score2,
        winner=teams.get(row.winner_id),
        is_bye=row.is_bye,
        is_draw=row.is_draw,
        next_match_id=row.next_match_id,
        next_slot=row.next_slot,
        next_loser_match_id=row.next_loser_match_id,
        next_loser_slot=row.next_loser_slot,
        group=row.group or None,
    )


def load_match_graph(tournament_id) -> MatchGraph:
    """Rebuild the match graph of a started tournament.

    Brackets come back in their stored order, rounds and matches in
    round and match-number order. Leaderboards are the only format whose
    bracket may have no rows yet; it is recreated empty.

    Raises:
        NotFound: If the tournament does not exist or has not been started
    """
    tournament = get_tournament(tournament_id)
    if not tournament.is_started:
        raise NotFound(f"Tournament {tournament_id} has no bracket")

    bracket_type = BracketType(tournament.bracket_type)
    teams = [team_to_structure(team) for team in tournament.teams.all()]
    teams_by_pk = {int(team.id): team for team in teams}

    brackets: Dict[int, Bracket] = {}
    rows = tournament.matches.order_by('bracket_order', 'round', 'match_number')
    for row in rows:
        bracket = brackets.get(row.bracket_order)
        if bracket is None:
            bracket = Bracket(name=row.bracket_name, side=BracketSide(row.bracket_side))
            brackets[row.bracket_order] = bracket
        if not bracket.rounds or bracket.rounds[-1].number != row.round:
            bracket.rounds.append(Round(number=row.round, name=row.round_name))
        bracket.rounds[-1].matches.append(match_to_structure(row, teams_by_pk))

    ordered = [brackets[order] for order in sorted(brackets)]
    if bracket_type is BracketType.LEADERBOARD and not ordered:
        ordered.append(Bracket(name=LEADERBOARD_BRACKET))

    graph = MatchGraph(
        tournament_id=str(tournament.pk),
        bracket_type=bracket_type,
        max_teams=tournament.max_teams,
        revision=tournament.revision,
        teams=teams,
        brackets=ordered,
        finished=(
            bracket_type is BracketType.LEADERBOARD
            and tournament.status == TournamentStatus.COMPLETED.value
        ),
    )
    graph.rebuild_statuses()
    return graph
