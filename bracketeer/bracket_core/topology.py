"""
Format dispatch for bracket construction.

Every supported BracketType maps to exactly one Topology entry. Consumers go
through build_brackets / create_match_graph and never branch on the format.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

from bracketeer.bracket_core.advancement import resolve_byes
from bracketeer.bracket_core.double_elimination import build_double_elimination
from bracketeer.bracket_core.exceptions import UnsupportedFormat
from bracketeer.bracket_core.groups import build_group_stage
from bracketeer.bracket_core.knockout import build_single_elimination
from bracketeer.bracket_core.leaderboard import build_leaderboard
from bracketeer.bracket_core.seeding import assign_first_round, random_draw, validate_entrants
from bracketeer.bracket_core.structure import Bracket, BracketType, MatchGraph, Team
from bracketeer.bracket_core.swiss import build_swiss


@dataclass(frozen=True)
class Topology:
    build: Callable[[List[Team], int], List[Bracket]]
    min_teams: int = 2
    # Whether teams are placed by first-round slot assignment after building
    assigns_first_round: bool = True


TOPOLOGIES: Dict[BracketType, Topology] = {
    BracketType.SINGLE_ELIMINATION: Topology(build=build_single_elimination),
    BracketType.DOUBLE_ELIMINATION: Topology(build=build_double_elimination),
    BracketType.SWISS: Topology(build=build_swiss),
    BracketType.GROUP_STAGE: Topology(build=build_group_stage, assigns_first_round=False),
    BracketType.LEADERBOARD: Topology(
        build=build_leaderboard, min_teams=1, assigns_first_round=False
    ),
}


def coerce_bracket_type(value: Union[BracketType, str]) -> BracketType:
    if isinstance(value, BracketType):
        return value
    try:
        return BracketType(str(value).upper())
    except ValueError:
        raise UnsupportedFormat(f"Unknown bracket type: {value!r}")


def get_topology(bracket_type: Union[BracketType, str]) -> Topology:
    bracket_type = coerce_bracket_type(bracket_type)
    try:
        return TOPOLOGIES[bracket_type]
    except KeyError:
        raise UnsupportedFormat(f"No topology registered for {bracket_type.value}")


def build_brackets(
    bracket_type: Union[BracketType, str], teams: List[Team], max_teams: int
) -> List[Bracket]:
    """Validate the entrants and build the empty brackets for a format."""
    topology = get_topology(bracket_type)
    validate_entrants(teams, max_teams, topology.min_teams)
    return topology.build(list(teams), max_teams)


def create_match_graph(
    tournament_id: str,
    bracket_type: Union[BracketType, str],
    teams: List[Team],
    max_teams: int,
    shuffle: bool = False,
    seed: Optional[int] = None,
) -> MatchGraph:
    """Build, assign and bye-resolve the initial match graph of a tournament.

    With shuffle=True the teams are randomly drawn (reproducibly for a given
    seed) before assignment; otherwise registration order is kept.
    """
    bracket_type = coerce_bracket_type(bracket_type)
    topology = get_topology(bracket_type)
    validate_entrants(teams, max_teams, topology.min_teams)

    entrants = random_draw(teams, seed) if shuffle else list(teams)
    brackets = topology.build(entrants, max_teams)
    graph = MatchGraph(
        tournament_id=tournament_id,
        bracket_type=bracket_type,
        max_teams=max_teams,
        teams=list(teams),
        brackets=brackets,
    )
    if topology.assigns_first_round:
        assign_first_round(brackets[0], entrants)
    resolve_byes(graph)
    return graph
