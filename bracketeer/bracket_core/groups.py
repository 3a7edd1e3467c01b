"""
Group stage (round robin) construction.

Teams are dealt in registration order into ceil(n / 4) contiguous groups
whose sizes differ by at most one. Every group is its own bracket with a
single round holding the full round-robin match set.
"""

import math
import string
from itertools import combinations
from typing import List

from bracketeer.bracket_core.structure import Bracket, Match, Round, Team

GROUP_SIZE = 4


def group_count(team_count: int) -> int:
    return math.ceil(team_count / GROUP_SIZE)


def group_name(index: int) -> str:
    """Group A, Group B, ... Group Z, Group AA, ..."""
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = string.ascii_uppercase[remainder] + letters
    return f"Group {letters}"


def partition_teams(teams: List[Team]) -> List[List[Team]]:
    """Split teams into balanced groups, larger groups first."""
    count = group_count(len(teams))
    base, extra = divmod(len(teams), count)
    groups = []
    start = 0
    for index in range(count):
        size = base + 1 if index < extra else base
        groups.append(teams[start:start + size])
        start += size
    return groups


def build_group_stage(teams: List[Team], max_teams: int) -> List[Bracket]:
    brackets = []
    next_id = 1
    for index, members in enumerate(partition_teams(teams)):
        name = group_name(index)
        matches = []
        for match_number, (team1, team2) in enumerate(combinations(members, 2)):
            match = Match(id=next_id, round=1, match_number=match_number, group=name)
            match.slot1.fill(team1)
            match.slot2.fill(team2)
            matches.append(match)
            next_id += 1
        brackets.append(
            Bracket(name=name, rounds=[Round(number=1, name="Round Robin", matches=matches)])
        )
    return brackets
