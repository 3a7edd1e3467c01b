"""
Result application and propagation through the match graph.

This module provides functionality for:
- Validating and applying a reported match result
- Routing winners and losers along the pointers fixed at build time
- Auto-resolving byes and cascading them downstream
- Marking entrant statuses (losers bracket entry, elimination, champion)
- Filling the Grand Final once both finals are decided
- Detecting tournament completion
- Resetting a bracket to its post-assignment state

All functions mutate the graph passed in. Callers that need all-or-nothing
semantics work on a copy (see MatchGraph.copy) and keep it only on success.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from bracketeer.bracket_core.exceptions import NotFound, StateConflict, ValidationError
from bracketeer.bracket_core.structure import (
    LEADERBOARD_BRACKET,
    SWISS_BRACKET,
    BracketSide,
    BracketType,
    EntrantStatus,
    Match,
    MatchGraph,
    MatchState,
    Team,
)
from bracketeer.bracket_core.swiss import swiss_round_count

logger = logging.getLogger(__name__)


@dataclass
class AdvancementInfo:
    """What a single result report changed in the graph."""

    match_id: int
    winner: Optional[Team] = None
    loser: Optional[Team] = None
    is_draw: bool = False
    next_match_id: Optional[int] = None
    next_loser_match_id: Optional[int] = None
    eliminated: List[Team] = field(default_factory=list)
    grand_final_ready: bool = False
    tournament_completed: bool = False
    touched_match_ids: List[int] = field(default_factory=list)

    @property
    def bracket_changed(self) -> bool:
        """True when more than the reported match changed."""
        return (
            len(self.touched_match_ids) > 1
            or self.grand_final_ready
            or self.tournament_completed
        )

    def to_dict(self) -> Dict:
        return {
            "matchId": self.match_id,
            "winner": self.winner.to_dict() if self.winner else None,
            "loser": self.loser.to_dict() if self.loser else None,
            "isDraw": self.is_draw,
            "nextMatchId": self.next_match_id,
            "nextLoserMatchId": self.next_loser_match_id,
            "eliminated": [team.to_dict() for team in self.eliminated],
            "grandFinalReady": self.grand_final_ready,
            "tournamentCompleted": self.tournament_completed,
            "touchedMatchIds": list(self.touched_match_ids),
            "bracketChanged": self.bracket_changed,
        }


def validate_score(value, label: str) -> None:
    """Scores are optional, but when given must be non-negative integers."""
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"{label} must not be negative, got {value}")


def _integrity_error(graph: MatchGraph, message: str) -> StateConflict:
    logger.error("Routing integrity violation in tournament %s: %s", graph.tournament_id, message)
    return StateConflict(message)


def _place(
    graph: MatchGraph,
    source: Match,
    target_id: int,
    slot_number: Optional[int],
    team: Optional[Team],
) -> Match:
    """Put `team` (or a bye when None) into a slot of the target match."""
    try:
        target = graph.get_match(target_id)
    except NotFound:
        raise _integrity_error(
            graph, f"Match {source.id} routes to missing match {target_id}"
        )

    if slot_number not in (1, 2):
        raise _integrity_error(
            graph, f"Match {source.id} routes to invalid slot {slot_number} of match {target_id}"
        )

    slot = target.slot(slot_number)
    if slot.is_resolved:
        raise _integrity_error(
            graph,
            f"Slot {slot_number} of match {target_id} already holds {slot.label()}",
        )
    if team is not None:
        if target.has_team(team.id):
            raise _integrity_error(
                graph, f"{team.name} would occupy both slots of match {target_id}"
            )
        if graph.status_of(team.id) is EntrantStatus.ELIMINATED:
            raise _integrity_error(
                graph, f"Eliminated team {team.name} routed into match {target_id}"
            )

    slot.fill(team)
    return target


def _auto_resolve(match: Match) -> bool:
    """Decide a match whose resolved slots include a bye."""
    if match.is_decided:
        return False
    if not (match.slot1.is_resolved and match.slot2.is_resolved):
        return False
    if not (match.slot1.is_bye or match.slot2.is_bye):
        return False
    match.is_bye = True
    match.winner = match.team1 or match.team2
    return True


def _propagate(graph: MatchGraph, match: Match, touched: List[int]) -> None:
    """Route the outcome of a decided match, cascading any byes it creates."""
    queue = deque([match])
    while queue:
        current = queue.popleft()
        routes = []
        if current.next_match_id is not None:
            routes.append((current.next_match_id, current.next_slot, current.winner))
        if current.next_loser_match_id is not None:
            loser = None if current.is_bye else current.loser
            routes.append((current.next_loser_match_id, current.next_loser_slot, loser))

        for target_id, slot_number, team in routes:
            target = _place(graph, current, target_id, slot_number, team)
            if target.id not in touched:
                touched.append(target.id)
            if _auto_resolve(target):
                queue.append(target)


def _mark_loser(graph: MatchGraph, match: Match, loser: Team) -> bool:
    """Update the loser's status. Returns True if the team is now eliminated."""
    if graph.bracket_type is BracketType.SINGLE_ELIMINATION:
        graph.statuses[loser.id] = EntrantStatus.ELIMINATED
        return True

    if graph.bracket_type is BracketType.DOUBLE_ELIMINATION:
        if (
            match.bracket_side is BracketSide.WINNERS
            and graph.status_of(loser.id) is EntrantStatus.ACTIVE
        ):
            graph.statuses[loser.id] = EntrantStatus.LOSERS_ENTRANT
            return False
        graph.statuses[loser.id] = EntrantStatus.ELIMINATED
        return True

    return False


def _crown_champion(graph: MatchGraph) -> Optional[Team]:
    champion = graph.champion
    if champion is not None:
        graph.statuses[champion.id] = EntrantStatus.CHAMPION
    return champion


def fill_grand_final(graph: MatchGraph, touched: List[int]) -> bool:
    """Populate the Grand Final once the winners and losers finals are decided.

    Returns True when the Grand Final was filled by this call.
    """
    grand_final = graph.grand_final
    if grand_final is None:
        return False
    if grand_final.slot1.is_resolved or grand_final.slot2.is_resolved:
        return False

    winners_final = graph.winners_final
    if winners_final is None or not winners_final.is_decided:
        return False

    losers_final = graph.losers_final
    if losers_final is None:
        losers_champion = winners_final.loser
    elif losers_final.is_decided:
        losers_champion = losers_final.winner
    else:
        return False

    grand_final.slot1.fill(winners_final.winner)
    grand_final.slot2.fill(losers_champion)
    touched.append(grand_final.id)
    logger.info(
        "Grand Final of tournament %s is set: %s", graph.tournament_id, grand_final
    )

    if _auto_resolve(grand_final):
        _propagate(graph, grand_final, touched)
    return True


def resolve_byes(graph: MatchGraph) -> List[int]:
    """Auto-decide every bye match in the graph and cascade the byes.

    Returns the ids of the matches that changed.
    """
    touched = []
    for match in sorted(graph.all_matches(), key=lambda m: m.id):
        if _auto_resolve(match):
            if match.id not in touched:
                touched.append(match.id)
            _propagate(graph, match, touched)
    fill_grand_final(graph, touched)
    _crown_champion(graph)
    return touched


def is_complete(graph: MatchGraph) -> bool:
    """Whether the tournament has reached its end state."""
    if graph.bracket_type is BracketType.LEADERBOARD:
        return graph.finished

    if graph.bracket_type is BracketType.SWISS:
        bracket = graph.bracket(SWISS_BRACKET)
        if len(bracket.rounds) < swiss_round_count(len(graph.teams)):
            return False

    matches = graph.all_matches()
    return bool(matches) and all(match.is_decided for match in matches)


def report_result(
    graph: MatchGraph,
    match_id: int,
    score1: Optional[int],
    score2: Optional[int],
    winner_id: Optional[str],
) -> AdvancementInfo:
    """Apply a result to a READY match and propagate it.

    The declared winner decides the match; scores are recorded for display
    only and are never compared. winner_id=None records a draw, which only
    non-elimination formats accept.
    """
    match = graph.get_match(match_id)

    if match.state is MatchState.DECIDED:
        raise StateConflict(f"Match {match_id} has already been decided")
    if match.state is not MatchState.READY:
        raise ValidationError(f"Match {match_id} is not ready: both teams must be known")

    validate_score(score1, "score1")
    validate_score(score2, "score2")

    if winner_id is None:
        if not graph.bracket_type.allows_draws:
            raise ValidationError(
                f"A winner is required in {graph.bracket_type.value.lower()} matches"
            )
    elif not match.has_team(winner_id):
        raise ValidationError(f"Team {winner_id} is not playing in match {match_id}")

    match.score1 = score1
    match.score2 = score2
    info = AdvancementInfo(match_id=match.id, touched_match_ids=[match.id])

    if winner_id is None:
        match.is_draw = True
        info.is_draw = True
    else:
        match.winner = match.team1 if match.team1.id == winner_id else match.team2
        info.winner = match.winner
        info.loser = match.loser
        info.next_match_id = match.next_match_id
        info.next_loser_match_id = match.next_loser_match_id

        if _mark_loser(graph, match, info.loser):
            info.eliminated.append(info.loser)
        _propagate(graph, match, info.touched_match_ids)

    info.grand_final_ready = fill_grand_final(graph, info.touched_match_ids)
    _crown_champion(graph)
    info.tournament_completed = is_complete(graph)

    logger.info(
        "Tournament %s match %s decided: %s",
        graph.tournament_id,
        match.id,
        "draw" if match.is_draw else f"{match.winner.name} won",
    )
    return info


def reset_bracket(graph: MatchGraph) -> List[int]:
    """Clear every result and routed placement, keeping the first-round assignment.

    Swiss tournaments fall back to their first round and leaderboards lose all
    recorded results. Returns the ids of the remaining matches.
    """
    if graph.bracket_type is BracketType.SWISS:
        bracket = graph.bracket(SWISS_BRACKET)
        del bracket.rounds[1:]
    elif graph.bracket_type is BracketType.LEADERBOARD:
        graph.bracket(LEADERBOARD_BRACKET).rounds = []
        graph.finished = False
    graph.reindex()

    for match in graph.all_matches():
        match.score1 = None
        match.score2 = None
        match.winner = None
        match.is_bye = False
        match.is_draw = False
        for slot in (match.slot1, match.slot2):
            if slot.source_match_id is not None:
                slot.clear()

    graph.statuses = {team.id: EntrantStatus.ACTIVE for team in graph.teams}
    resolve_byes(graph)
    logger.info("Reset bracket of tournament %s", graph.tournament_id)
    return [match.id for match in graph.all_matches()]
