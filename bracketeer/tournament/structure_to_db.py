"""
Convert bracket_core structures to database objects.

Every save runs in one transaction that first locks the tournament row, so a
graph is never visible half written. Each save bumps the tournament's
revision and a graph loaded at an older revision is rejected with
StateConflict. Match rows are versioned with django-reversion; each save
becomes one revision carrying a comment that says what changed.
"""

import logging
from typing import Dict, Iterable, Optional

import reversion
from django.db import transaction
from django.utils import timezone

from bracketeer.bracket_core.exceptions import NotFound, StateConflict
from bracketeer.bracket_core.structure import (
    Bracket,
    Match,
    MatchGraph,
    Round,
    Slot,
    TournamentStatus,
)
from bracketeer.tournament.db_to_structure import (
    get_tournament,
    match_to_structure,
    team_to_structure,
)

logger = logging.getLogger(__name__)


def _team_row(team_rows: Dict[str, object], team, match: Match):
    if team is None:
        return None
    try:
        return team_rows[team.id]
    except KeyError:
        raise StateConflict(f"Match {match.id} references unknown team {team.id}")


def _slot_values(prefix: str, slot: Slot) -> Dict:
    return {
        f'{prefix}_is_bye': slot.is_bye,
        f'{prefix}_source_match_id': slot.source_match_id,
        f'{prefix}_source_outcome': slot.source_outcome or '',
    }


def _result_values(match: Match, team_rows: Dict[str, object]) -> Dict:
    """Fields a result report may change."""
    values = {
        'team1': _team_row(team_rows, match.team1, match),
        'team2': _team_row(team_rows, match.team2, match),
        'score1': match.score1,
        'score2': match.score2,
        'winner': _team_row(team_rows, match.winner, match),
        'is_bye': match.is_bye,
        'is_draw': match.is_draw,
    }
    values.update(_slot_values('slot1', match.slot1))
    values.update(_slot_values('slot2', match.slot2))
    return values


def _layout_values(bracket_order: int, bracket: Bracket, round: Round, match: Match) -> Dict:
    """Fields fixed when the match is created."""
    return {
        'bracket_name': bracket.name,
        'bracket_order': bracket_order,
        'bracket_side': match.bracket_side.value,
        'round': match.round,
        'round_name': round.name,
        'match_number': match.match_number,
        'group': match.group or '',
        'next_match_id': match.next_match_id,
        'next_slot': match.next_slot,
        'next_loser_match_id': match.next_loser_match_id,
        'next_loser_slot': match.next_loser_slot,
    }


def _team_rows(tournament) -> Dict[str, object]:
    return {str(team.pk): team for team in tournament.teams.all()}


def _check_revision(tournament, revision: int) -> None:
    if tournament.revision != revision:
        logger.warning(
            "Rejected stale save of tournament %s (loaded at revision %s, stored %s)",
            tournament.pk,
            revision,
            tournament.revision,
        )
        raise StateConflict(f"Tournament {tournament.pk} changed since it was loaded, try again")


def _apply_status(tournament, status: TournamentStatus) -> None:
    """Set the status, stamping start and end dates as the tournament moves along."""
    now = timezone.now()
    tournament.status = status.value
    if status is TournamentStatus.IN_PROGRESS:
        tournament.start_date = tournament.start_date or now
        tournament.end_date = None
    elif status is TournamentStatus.COMPLETED:
        tournament.end_date = tournament.end_date or now


_STATUS_FIELDS = ['status', 'start_date', 'end_date']


def save_graph(
    graph: MatchGraph,
    status: Optional[TournamentStatus] = None,
    comment: str = 'Saved bracket.',
) -> None:
    """Write the whole graph: upsert every match and delete rows it no longer has.

    The tournament's format and size are stored alongside so that loading
    rebuilds exactly this graph, and the status too when one is given.

    Raises:
        StateConflict: If the tournament was saved since `graph` was loaded
    """
    from bracketeer.tournament.models import Match as MatchRow

    with transaction.atomic(), reversion.create_revision():
        reversion.set_comment(comment)
        tournament = get_tournament(graph.tournament_id, for_update=True)
        _check_revision(tournament, graph.revision)

        tournament.bracket_type = graph.bracket_type.value
        tournament.max_teams = graph.max_teams
        tournament.revision += 1
        update_fields = ['bracket_type', 'max_teams', 'revision', 'date_modified']
        if status is not None:
            _apply_status(tournament, status)
            update_fields += _STATUS_FIELDS
        tournament.save(update_fields=update_fields)

        team_rows = _team_rows(tournament)
        existing = {row.match_id: row for row in tournament.matches.all()}
        kept = set()
        for bracket_order, bracket in enumerate(graph.brackets):
            for round in bracket.rounds:
                for match in round.matches:
                    values = _layout_values(bracket_order, bracket, round, match)
                    values.update(_result_values(match, team_rows))
                    row = existing.get(match.id)
                    if row is None:
                        row = MatchRow(tournament=tournament, match_id=match.id)
                    for name, value in values.items():
                        setattr(row, name, value)
                    row.save()
                    kept.add(match.id)

        stale = [match_id for match_id in existing if match_id not in kept]
        if stale:
            tournament.matches.filter(match_id__in=stale).delete()
        logger.debug(
            "Saved %s matches of tournament %s (%s removed)",
            len(kept),
            graph.tournament_id,
            len(stale),
        )

    graph.revision = tournament.revision


def save_matches(
    tournament_id,
    matches: Iterable[Match],
    revision: Optional[int] = None,
    status: Optional[TournamentStatus] = None,
    comment: str = 'Reported result.',
) -> None:
    """Update the result and slot fields of existing match rows.

    A stored result or team placement is never replaced, whichever snapshot
    the caller worked from.

    Raises:
        NotFound: If the tournament or one of the matches has no row
        StateConflict: If `revision` is given and the tournament was saved
            since, or a match would overwrite a decided result or filled slot
    """
    matches = list(matches)
    with transaction.atomic(), reversion.create_revision():
        reversion.set_comment(comment)
        tournament = get_tournament(tournament_id, for_update=True)
        if revision is not None:
            _check_revision(tournament, revision)

        team_rows = _team_rows(tournament)
        teams = {team.pk: team_to_structure(team) for team in team_rows.values()}
        rows = {
            row.match_id: row
            for row in tournament.matches.filter(match_id__in=[m.id for m in matches])
        }
        for match in matches:
            row = rows.get(match.id)
            if row is None:
                raise NotFound(f"Match {match.id} not found in tournament {tournament_id}")
            match_to_structure(row, teams).check_overwrite(match)
            for name, value in _result_values(match, team_rows).items():
                setattr(row, name, value)
            row.save()

        tournament.revision += 1
        update_fields = ['revision', 'date_modified']
        if status is not None:
            _apply_status(tournament, status)
            update_fields += _STATUS_FIELDS
        tournament.save(update_fields=update_fields)


def save_match(tournament_id, match: Match) -> None:
    save_matches(tournament_id, [match])


def save_tournament_status(tournament_id, status: TournamentStatus) -> None:
    with transaction.atomic():
        tournament = get_tournament(tournament_id, for_update=True)
        _apply_status(tournament, status)
        tournament.save(update_fields=_STATUS_FIELDS + ['date_modified'])
