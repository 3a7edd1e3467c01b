"""
Match graph representation for bracket tournaments.

This module provides the core entity set the engine works on:
- Teams (opaque identity plus display name)
- Slots (a concrete team, a bye, or a forward reference to another match)
- Matches, Rounds and Brackets
- The MatchGraph owned by one tournament
- Standings records derived from decided matches

Everything else in bracket_core builds on these structures.
"""

import copy
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from bracketeer.bracket_core.exceptions import NotFound, StateConflict


MAIN_BRACKET = "Main"
WINNERS_BRACKET = "WinnersBracket"
LOSERS_BRACKET = "LosersBracket"
GRAND_FINAL_BRACKET = "GrandFinal"
SWISS_BRACKET = "Swiss"
LEADERBOARD_BRACKET = "Leaderboard"

WINNER = "winner"
LOSER = "loser"


class BracketType(Enum):
    """Supported tournament formats."""

    SINGLE_ELIMINATION = "SINGLE_ELIMINATION"
    DOUBLE_ELIMINATION = "DOUBLE_ELIMINATION"
    SWISS = "SWISS"
    GROUP_STAGE = "GROUP_STAGE"
    LEADERBOARD = "LEADERBOARD"

    @property
    def is_elimination(self) -> bool:
        return self in (BracketType.SINGLE_ELIMINATION, BracketType.DOUBLE_ELIMINATION)

    @property
    def allows_draws(self) -> bool:
        return not self.is_elimination


class BracketSide(Enum):
    WINNERS = "WINNERS"
    LOSERS = "LOSERS"
    NONE = "NONE"


class MatchState(Enum):
    """Lifecycle of a single match."""

    PENDING = "PENDING"  # at least one slot unresolved
    READY = "READY"  # both slots hold concrete teams
    DECIDED = "DECIDED"  # winner set, draw recorded, or bye resolved


class EntrantStatus(Enum):
    ACTIVE = "ACTIVE"
    LOSERS_ENTRANT = "LOSERS_ENTRANT"
    ELIMINATED = "ELIMINATED"
    CHAMPION = "CHAMPION"


class TournamentStatus(Enum):
    DRAFT = "DRAFT"
    REGISTRATION = "REGISTRATION"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class Team:
    """A registered team, referenced by value inside the engine."""

    id: str
    name: str

    def to_dict(self) -> Dict:
        return {"id": self.id, "name": self.name}


def _team_id(team: Optional[Team]) -> Optional[str]:
    return team.id if team is not None else None


@dataclass
class Slot:
    """One side of a match.

    A slot is resolved once it holds a concrete team or a bye. Until then it
    may carry a forward reference ("winner of match 3") used for display.
    """

    team: Optional[Team] = None
    is_bye: bool = False
    source_match_id: Optional[int] = None
    source_outcome: Optional[str] = None  # WINNER or LOSER

    @property
    def is_resolved(self) -> bool:
        return self.team is not None or self.is_bye

    @property
    def is_placeholder(self) -> bool:
        return not self.is_resolved and self.source_match_id is not None

    def fill(self, team: Optional[Team]) -> None:
        """Resolve the slot with a team, or with a bye when team is None."""
        if self.is_resolved:
            raise StateConflict(f"Slot already holds {self.label()}")
        if team is None:
            self.is_bye = True
        else:
            self.team = team

    def clear(self) -> None:
        self.team = None
        self.is_bye = False

    def label(self) -> str:
        if self.team is not None:
            return self.team.name
        if self.is_bye:
            return "BYE"
        if self.source_match_id is not None:
            return f"{(self.source_outcome or WINNER).capitalize()} of match {self.source_match_id}"
        return "TBD"

    def to_dict(self) -> Dict:
        return {
            "team": self.team.to_dict() if self.team else None,
            "isBye": self.is_bye,
            "sourceMatchId": self.source_match_id,
            "sourceOutcome": self.source_outcome,
            "label": self.label(),
        }


@dataclass
class Match:
    """The atomic unit of a bracket.

    Matches are mutated in place by the advancement engine. The routing
    pointers (next_match_id / next_loser_match_id and their slot numbers) are
    fixed when the topology is built and never searched for afterwards.
    """

    id: int
    round: int
    match_number: int  # 0-based position within the round
    bracket_side: BracketSide = BracketSide.NONE
    slot1: Slot = field(default_factory=Slot)
    slot2: Slot = field(default_factory=Slot)
    score1: Optional[int] = None
    score2: Optional[int] = None
    winner: Optional[Team] = None
    is_bye: bool = False
    is_draw: bool = False
    next_match_id: Optional[int] = None
    next_slot: Optional[int] = None
    next_loser_match_id: Optional[int] = None
    next_loser_slot: Optional[int] = None
    group: Optional[str] = None

    def slot(self, number: int) -> Slot:
        if number == 1:
            return self.slot1
        if number == 2:
            return self.slot2
        raise ValueError(f"Invalid slot number: {number}")

    @property
    def team1(self) -> Optional[Team]:
        return self.slot1.team

    @property
    def team2(self) -> Optional[Team]:
        return self.slot2.team

    @property
    def teams(self) -> List[Team]:
        """Concrete teams currently occupying the match."""
        return [t for t in (self.slot1.team, self.slot2.team) if t is not None]

    def has_team(self, team_id: str) -> bool:
        return any(t.id == team_id for t in self.teams)

    def opponent_of(self, team_id: str) -> Optional[Team]:
        if self.team1 and self.team1.id == team_id:
            return self.team2
        if self.team2 and self.team2.id == team_id:
            return self.team1
        return None

    @property
    def state(self) -> MatchState:
        if self.winner is not None or self.is_bye or self.is_draw:
            return MatchState.DECIDED
        if self.team1 is not None and self.team2 is not None:
            return MatchState.READY
        return MatchState.PENDING

    @property
    def is_decided(self) -> bool:
        return self.state is MatchState.DECIDED

    @property
    def loser(self) -> Optional[Team]:
        """The losing team of a played match, None for byes and draws."""
        if self.winner is None or self.is_bye:
            return None
        return self.opponent_of(self.winner.id)

    def check_overwrite(self, update: "Match") -> None:
        """Raise StateConflict if storing `update` over this match would change
        a decided result or a filled slot."""
        if self.is_decided and (
            _team_id(self.winner) != _team_id(update.winner)
            or self.is_draw != update.is_draw
            or self.is_bye != update.is_bye
        ):
            raise StateConflict(f"Match {self.id} has already been decided")
        for number in (1, 2):
            stored, updated = self.slot(number), update.slot(number)
            if stored.is_resolved and (
                _team_id(stored.team) != _team_id(updated.team) or stored.is_bye != updated.is_bye
            ):
                raise StateConflict(f"Slot {number} of match {self.id} is already filled")

    def score_for(self, team_id: str) -> Tuple[Optional[int], Optional[int]]:
        """Return (scored, conceded) from the perspective of team_id."""
        if self.team1 and self.team1.id == team_id:
            return (self.score1, self.score2)
        return (self.score2, self.score1)

    def __str__(self) -> str:
        return f"[{self.id}] {self.slot1.label()} vs {self.slot2.label()}"

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "round": self.round,
            "matchNumber": self.match_number,
            "bracketSide": self.bracket_side.value,
            "group": self.group,
            "slot1": self.slot1.to_dict(),
            "slot2": self.slot2.to_dict(),
            "score1": self.score1,
            "score2": self.score2,
            "winner": self.winner.to_dict() if self.winner else None,
            "isBye": self.is_bye,
            "isDraw": self.is_draw,
            "state": self.state.value,
            "nextMatchId": self.next_match_id,
            "nextLoserMatchId": self.next_loser_match_id,
        }


@dataclass
class Round:
    """Ordered matches sharing a round index within one bracket."""

    number: int
    name: str
    matches: List[Match] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "roundNumber": self.number,
            "name": self.name,
            "matches": [m.to_dict() for m in self.matches],
        }


@dataclass
class Bracket:
    """A named collection of rounds (winners bracket, losers bracket, a group...)."""

    name: str
    side: BracketSide = BracketSide.NONE
    rounds: List[Round] = field(default_factory=list)

    @property
    def matches(self) -> List[Match]:
        all_matches = []
        for round in self.rounds:
            all_matches.extend(round.matches)
        return all_matches

    @property
    def final(self) -> Optional[Match]:
        """The single match of the last round, if the bracket narrows to one."""
        if not self.rounds or len(self.rounds[-1].matches) != 1:
            return None
        return self.rounds[-1].matches[0]

    @property
    def teams(self) -> List[Team]:
        """Teams seen in this bracket, in first-appearance order."""
        seen = {}
        for match in self.matches:
            for team in match.teams:
                seen.setdefault(team.id, team)
        return list(seen.values())

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "side": self.side.value,
            "rounds": [r.to_dict() for r in self.rounds],
        }


@dataclass(frozen=True)
class Standing:
    """Derived ranking record for one team. Never persisted."""

    rank: int
    team: Team
    points: int
    played: int
    wins: int
    draws: int
    losses: int
    tiebreak: float
    score_for: int = 0
    score_against: int = 0

    def to_dict(self) -> Dict:
        return {
            "rank": self.rank,
            "team": self.team.to_dict(),
            "points": self.points,
            "played": self.played,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "tiebreak": self.tiebreak,
            "scoreFor": self.score_for,
            "scoreAgainst": self.score_against,
        }


@dataclass
class MatchGraph:
    """The owned match graph of one tournament."""

    tournament_id: str
    bracket_type: BracketType
    max_teams: int
    teams: List[Team] = field(default_factory=list)
    brackets: List[Bracket] = field(default_factory=list)
    statuses: Dict[str, EntrantStatus] = field(default_factory=dict)
    finished: bool = False  # explicit close, used by leaderboards
    revision: int = 0  # stored revision this graph was loaded at
    _match_index: Dict[int, Match] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        for team in self.teams:
            self.statuses.setdefault(team.id, EntrantStatus.ACTIVE)

    # Lookups

    def all_matches(self) -> List[Match]:
        matches = []
        for bracket in self.brackets:
            matches.extend(bracket.matches)
        return matches

    def reindex(self) -> None:
        """Rebuild the match id index. Call after removing or replacing matches."""
        self._match_index = {match.id: match for match in self.all_matches()}

    def get_match(self, match_id: int) -> Match:
        match = self._match_index.get(match_id)
        if match is None or match.id != match_id:
            self.reindex()
            match = self._match_index.get(match_id)
        if match is None:
            raise NotFound(f"Match {match_id} not found in tournament {self.tournament_id}")
        return match

    def bracket(self, name: str) -> Bracket:
        for bracket in self.brackets:
            if bracket.name == name:
                return bracket
        raise NotFound(f"Bracket '{name}' not found in tournament {self.tournament_id}")

    def matches_in(self, bracket_name: str) -> List[Match]:
        return self.bracket(bracket_name).matches

    def has_bracket(self, name: str) -> bool:
        return any(b.name == name for b in self.brackets)

    def team(self, team_id: str) -> Team:
        for team in self.teams:
            if team.id == team_id:
                return team
        raise NotFound(f"Team {team_id} is not registered in tournament {self.tournament_id}")

    def next_match_id(self) -> int:
        return max((m.id for m in self.all_matches()), default=0) + 1

    @property
    def winners_final(self) -> Optional[Match]:
        if self.bracket_type is BracketType.DOUBLE_ELIMINATION:
            return self.bracket(WINNERS_BRACKET).final
        if self.bracket_type is BracketType.SINGLE_ELIMINATION:
            return self.bracket(MAIN_BRACKET).final
        return None

    @property
    def losers_final(self) -> Optional[Match]:
        if self.has_bracket(LOSERS_BRACKET):
            return self.bracket(LOSERS_BRACKET).final
        return None

    @property
    def grand_final(self) -> Optional[Match]:
        if self.has_bracket(GRAND_FINAL_BRACKET):
            return self.bracket(GRAND_FINAL_BRACKET).final
        return None

    @property
    def final_match(self) -> Optional[Match]:
        """The match whose winner is the tournament champion."""
        if self.bracket_type is BracketType.DOUBLE_ELIMINATION:
            return self.grand_final
        return self.winners_final

    @property
    def champion(self) -> Optional[Team]:
        final = self.final_match
        return final.winner if final is not None else None

    def losses_of(self, team_id: str) -> List[Match]:
        return [
            m
            for m in self.all_matches()
            if m.loser is not None and m.loser.id == team_id
        ]

    def status_of(self, team_id: str) -> EntrantStatus:
        return self.statuses.get(team_id, EntrantStatus.ACTIVE)

    # Maintenance

    def rebuild_statuses(self) -> None:
        """Recompute entrant statuses from the decided matches.

        Used after loading a graph from persistence. The rules are order
        independent so the result matches incremental marking.
        """
        statuses = {team.id: EntrantStatus.ACTIVE for team in self.teams}

        if self.bracket_type.is_elimination:
            losses = defaultdict(list)
            for match in self.all_matches():
                if match.loser is not None:
                    losses[match.loser.id].append(match)

            for team_id, lost in losses.items():
                if self.bracket_type is BracketType.SINGLE_ELIMINATION:
                    statuses[team_id] = EntrantStatus.ELIMINATED
                elif len(lost) >= 2 or any(
                    m.bracket_side is not BracketSide.WINNERS for m in lost
                ):
                    statuses[team_id] = EntrantStatus.ELIMINATED
                else:
                    statuses[team_id] = EntrantStatus.LOSERS_ENTRANT

            champion = self.champion
            if champion is not None:
                statuses[champion.id] = EntrantStatus.CHAMPION

        self.statuses = statuses

    def check_invariants(self) -> None:
        """Raise StateConflict if a structural invariant is violated."""
        seen_ids = set()
        for match in self.all_matches():
            if match.id in seen_ids:
                raise StateConflict(f"Duplicate match id {match.id}")
            seen_ids.add(match.id)

            if (
                match.team1 is not None
                and match.team2 is not None
                and match.team1.id == match.team2.id
            ):
                raise StateConflict(f"Match {match.id} has {match.team1.name} in both slots")

            if match.winner is not None:
                if not match.has_team(match.winner.id):
                    raise StateConflict(
                        f"Winner of match {match.id} is not one of its teams"
                    )
                if not match.is_bye and len(match.teams) != 2:
                    raise StateConflict(
                        f"Match {match.id} has a winner before both slots resolved"
                    )

        for match in self.all_matches():
            for target_id in (match.next_match_id, match.next_loser_match_id):
                if target_id is not None and target_id not in seen_ids:
                    raise StateConflict(
                        f"Match {match.id} routes to missing match {target_id}"
                    )

    def copy(self) -> "MatchGraph":
        """Deep snapshot, used to apply a change atomically."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict:
        return {
            "tournamentId": self.tournament_id,
            "bracketType": self.bracket_type.value,
            "maxTeams": self.max_teams,
            "teams": [t.to_dict() for t in self.teams],
            "brackets": [b.to_dict() for b in self.brackets],
            "statuses": {tid: s.value for tid, s in self.statuses.items()},
            "champion": self.champion.to_dict() if self.champion else None,
        }
