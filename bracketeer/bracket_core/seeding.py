"""
Entry validation and first-round slot assignment.

Assignment is deterministic: the team at registration index i goes to
first-round match floor(i/2), slot1 when i is even and slot2 when odd. Any
slot left over is a bye, so byes always fall to the last registered teams.
"""

import random
from typing import List, Optional

from bracketeer.bracket_core.exceptions import (
    InsufficientTeams,
    StateConflict,
    UnsupportedFormat,
    ValidationError,
)
from bracketeer.bracket_core.structure import Bracket, Team

# Largest max_teams any format accepts.
MAX_BRACKET_SIZE = 1024


def validate_entrants(teams: List[Team], max_teams: int, minimum: int = 2) -> None:
    """Reject team lists a topology cannot be built from."""
    if not teams:
        raise InsufficientTeams("Cannot build a bracket with zero teams")

    if isinstance(max_teams, bool) or not isinstance(max_teams, int) or max_teams < 1:
        raise UnsupportedFormat(f"max_teams must be a positive integer, got {max_teams!r}")
    if max_teams > MAX_BRACKET_SIZE:
        raise UnsupportedFormat(
            f"max_teams may be at most {MAX_BRACKET_SIZE}, got {max_teams}"
        )

    ids = [team.id for team in teams]
    if len(set(ids)) != len(ids):
        raise ValidationError("Team list contains duplicate team ids")

    if len(teams) > max_teams:
        raise UnsupportedFormat(
            f"{len(teams)} teams registered but the tournament allows at most {max_teams}"
        )

    if len(teams) < minimum:
        raise InsufficientTeams(
            f"At least {minimum} teams are required, only {len(teams)} registered"
        )


def _planned_slots(teams: List[Team], capacity: int) -> List[Optional[Team]]:
    return list(teams) + [None] * (capacity - len(teams))


def assign_first_round(bracket: Bracket, teams: List[Team]) -> None:
    """Place teams into the first round of `bracket` in registration order.

    Leftover slots are marked as byes. Running this again with the same teams
    is a no-op; running it with a different assignment raises StateConflict.
    """
    if not bracket.rounds:
        raise ValidationError(f"Bracket '{bracket.name}' has no rounds to assign")

    first_round = bracket.rounds[0].matches
    slots = []
    for match in first_round:
        slots.extend([match.slot1, match.slot2])

    if len(teams) > len(slots):
        raise ValidationError(
            f"{len(teams)} teams do not fit in {len(slots)} first-round slots"
        )

    planned = _planned_slots(teams, len(slots))

    if any(slot.is_resolved for slot in slots):
        for slot, team in zip(slots, planned):
            if team is None and slot.is_bye and slot.team is None:
                continue
            if team is not None and slot.team == team:
                continue
            raise StateConflict(f"Bracket '{bracket.name}' is already assigned differently")
        return

    for slot, team in zip(slots, planned):
        slot.fill(team)


def random_draw(teams: List[Team], seed: Optional[int] = None) -> List[Team]:
    """Return a shuffled copy of `teams`, reproducible when a seed is given."""
    drawn = list(teams)
    random.Random(seed).shuffle(drawn)
    return drawn
