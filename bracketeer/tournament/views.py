"""
JSON API over the bracket engine.

Engine errors map to HTTP statuses:

    NotFound -> 404, ValidationError / UnsupportedFormat -> 400,
    StateConflict -> 409, anything else -> 500 (logged)

Every error response has the shape {"error": "<message>"}.
"""

import functools
import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from bracketeer.bracket_core.advancement import is_complete
from bracketeer.bracket_core.exceptions import (
    BracketError,
    NotFound,
    StateConflict,
    UnsupportedFormat,
    ValidationError,
)
from bracketeer.tournament.db_to_structure import get_tournament
from bracketeer.tournament.forms import LeaderboardResultForm, MatchResultForm, StartTournamentForm
from bracketeer.tournament.services import get_engine

logger = logging.getLogger(__name__)

ERROR_STATUSES = (
    (NotFound, 404),
    (ValidationError, 400),
    (UnsupportedFormat, 400),
    (StateConflict, 409),
)


def error_status(error: BracketError) -> int:
    for error_class, status in ERROR_STATUSES:
        if isinstance(error, error_class):
            return status
    return 500


def bracket_api(*methods):
    """Wrap a view returning JSON-able data with method checks and error mapping."""

    def decorator(view):
        @csrf_exempt
        @require_http_methods(list(methods))
        @functools.wraps(view)
        def wrapper(request, *args, **kwargs):
            try:
                data, status = view(request, *args, **kwargs)
            except BracketError as e:
                status = error_status(e)
                if status == 500:
                    logger.exception("Unmapped bracket error in %s", view.__name__)
                return JsonResponse({'error': str(e)}, status=status)
            except Exception:
                logger.exception("Unhandled error in %s", view.__name__)
                return JsonResponse({'error': 'Internal server error'}, status=500)
            return JsonResponse(data, status=status)

        return wrapper

    return decorator


def _json_body(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError('Request body is not valid JSON')
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _tid(tournament_id):
    return str(tournament_id)


@bracket_api('POST')
def start_tournament(request, tournament_id):
    tournament = get_tournament(tournament_id)
    options = StartTournamentForm(_json_body(request)).cleaned_or_raise()
    graph = get_engine().start_tournament(
        _tid(tournament_id),
        options['bracketType'] or tournament.bracket_type,
        options['maxTeams'] or tournament.max_teams,
        shuffle=options['shuffle'],
        seed=options['seed'],
    )
    return graph.to_dict(), 201


@bracket_api('GET')
def bracket(request, tournament_id):
    graph = get_engine().bracket(_tid(tournament_id))
    data = graph.to_dict()
    data['completed'] = is_complete(graph)
    return data, 200


@bracket_api('PUT', 'POST')
def report_result(request, tournament_id, match_id):
    result = MatchResultForm(_json_body(request)).cleaned_or_raise()
    report = get_engine().report_result(
        _tid(tournament_id),
        match_id,
        result['score1'],
        result['score2'],
        result['winnerId'],
    )
    return report.to_dict(), 200


@bracket_api('GET')
def standings(request, tournament_id):
    bracket_name = request.GET.get('bracket') or None
    rows = get_engine().standings(_tid(tournament_id), bracket_name)
    return {'bracket': bracket_name, 'standings': [row.to_dict() for row in rows]}, 200


@bracket_api('GET')
def group_standings(request, tournament_id):
    tables = get_engine().group_standings(_tid(tournament_id))
    return {
        'groups': [
            {'name': name, 'standings': [row.to_dict() for row in rows]}
            for name, rows in tables.items()
        ]
    }, 200


@bracket_api('POST')
def next_swiss_round(request, tournament_id):
    new_round = get_engine().generate_next_swiss_round(_tid(tournament_id))
    return new_round.to_dict(), 201


@bracket_api('POST')
def leaderboard_result(request, tournament_id):
    result = LeaderboardResultForm(_json_body(request)).cleaned_or_raise()
    match = get_engine().record_leaderboard_result(
        _tid(tournament_id),
        result['team1Id'],
        result['team2Id'],
        result['score1'],
        result['score2'],
        result['winnerId'],
    )
    return match.to_dict(), 201


@bracket_api('POST')
def finish_tournament(request, tournament_id):
    graph = get_engine().finish_tournament(_tid(tournament_id))
    return graph.to_dict(), 200


@bracket_api('POST')
def reset_bracket(request, tournament_id):
    graph = get_engine().reset_bracket(_tid(tournament_id))
    return graph.to_dict(), 200
