"""
Knockout bracket construction.

This module provides functionality for:
- Sizing knockout brackets (power of two, padded with byes)
- Naming knockout rounds
- Building single elimination brackets with fixed, position-indexed routing

Match m of round r always feeds match floor(m/2) of round r+1, into slot1
when m is even and slot2 when m is odd.
"""

import math
from typing import List

from bracketeer.bracket_core.structure import (
    MAIN_BRACKET,
    WINNER,
    Bracket,
    BracketSide,
    Match,
    Round,
    Team,
)


def next_power_of_two(n: int) -> int:
    """Smallest power of two greater than or equal to n (and at least 2)."""
    if n <= 2:
        return 2
    return 1 << (n - 1).bit_length()


def validate_bracket_size(size: int) -> bool:
    """Check if a bracket size is a valid power of 2."""
    return size > 1 and (size & (size - 1)) == 0


def calculate_rounds_needed(size: int) -> int:
    """Calculate number of rounds needed for a knockout bracket of `size` slots."""
    if not validate_bracket_size(size):
        raise ValueError(f"Bracket size {size} is not a power of 2")
    return int(math.log2(size))


def bracket_size(team_count: int, max_teams: int) -> int:
    return next_power_of_two(max(team_count, max_teams))


def get_knockout_stage_name(teams_remaining: int) -> str:
    """Get the standard name for a knockout round based on teams remaining."""
    stage_names = {
        2: "Final",
        4: "Semifinal",
        8: "Quarterfinal",
    }
    return stage_names.get(teams_remaining, f"Round of {teams_remaining}")


def feed_slot(match_number: int) -> int:
    """Slot a match's winner occupies in the next round."""
    return 1 if match_number % 2 == 0 else 2


def build_knockout_bracket(
    name: str,
    size: int,
    first_id: int = 1,
    side: BracketSide = BracketSide.NONE,
    round_prefix: str = "",
) -> Bracket:
    """Build an empty knockout bracket of `size` first-round slots.

    Match ids are assigned sequentially from `first_id` in round then
    position order. Slots of later rounds carry forward references to the
    matches that feed them.
    """
    rounds_needed = calculate_rounds_needed(size)
    bracket = Bracket(name=name, side=side)

    next_id = first_id
    for round_number in range(1, rounds_needed + 1):
        match_count = size >> round_number
        round_name = round_prefix + get_knockout_stage_name(match_count * 2)
        matches = []
        for match_number in range(match_count):
            matches.append(
                Match(
                    id=next_id,
                    round=round_number,
                    match_number=match_number,
                    bracket_side=side,
                )
            )
            next_id += 1
        bracket.rounds.append(Round(number=round_number, name=round_name, matches=matches))

    for previous, current in zip(bracket.rounds, bracket.rounds[1:]):
        for match in previous.matches:
            target = current.matches[match.match_number // 2]
            match.next_match_id = target.id
            match.next_slot = feed_slot(match.match_number)
            target.slot(match.next_slot).source_match_id = match.id
            target.slot(match.next_slot).source_outcome = WINNER

    return bracket


def build_single_elimination(teams: List[Team], max_teams: int) -> List[Bracket]:
    """Single elimination: one knockout bracket sized for max_teams."""
    size = bracket_size(len(teams), max_teams)
    return [build_knockout_bracket(MAIN_BRACKET, size)]
