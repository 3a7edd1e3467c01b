"""
Double elimination bracket construction.

The winners bracket is a full knockout bracket of k rounds. The losers
bracket alternates two kinds of rounds:

- intake ("minor") rounds, where losers dropping from winners round r meet
  the survivors of the losers bracket (survivor in slot1, dropped team in slot2)
- survivor ("major") rounds, which halve the losers bracket field

Losers round 1 is the exception: it pairs the winners round 1 losers against
each other. This gives 2(k-1) losers rounds. The Grand Final is a separate
single-match bracket whose slots stay empty until both finals are decided.
"""

from typing import List

from bracketeer.bracket_core.knockout import (
    bracket_size,
    build_knockout_bracket,
    feed_slot,
)
from bracketeer.bracket_core.structure import (
    GRAND_FINAL_BRACKET,
    LOSER,
    LOSERS_BRACKET,
    WINNER,
    WINNERS_BRACKET,
    Bracket,
    BracketSide,
    Match,
    Round,
    Team,
)


def losers_round_count(winners_rounds: int) -> int:
    return max(0, 2 * (winners_rounds - 1))


def _route_loser(source: Match, target: Match, slot_number: int) -> None:
    source.next_loser_match_id = target.id
    source.next_loser_slot = slot_number
    slot = target.slot(slot_number)
    slot.source_match_id = source.id
    slot.source_outcome = LOSER


def _route_winner(source: Match, target: Match, slot_number: int) -> None:
    source.next_match_id = target.id
    source.next_slot = slot_number
    slot = target.slot(slot_number)
    slot.source_match_id = source.id
    slot.source_outcome = WINNER


def _losers_round_name(number: int, total: int) -> str:
    if number == total:
        return "Losers Final"
    return f"Losers Round {number}"


def build_losers_bracket(winners: Bracket, first_id: int) -> Bracket:
    """Build the losers bracket fed by `winners` and wire the loser routes."""
    k = len(winners.rounds)
    total = losers_round_count(k)
    losers = Bracket(name=LOSERS_BRACKET, side=BracketSide.LOSERS)
    if total == 0:
        return losers

    next_id = first_id

    def new_round(match_count: int) -> Round:
        nonlocal next_id
        number = len(losers.rounds) + 1
        matches = []
        for match_number in range(match_count):
            matches.append(
                Match(
                    id=next_id,
                    round=number,
                    match_number=match_number,
                    bracket_side=BracketSide.LOSERS,
                )
            )
            next_id += 1
        round = Round(number=number, name=_losers_round_name(number, total), matches=matches)
        losers.rounds.append(round)
        return round

    # Round 1 pairs the winners round 1 losers against each other
    winners_first = winners.rounds[0].matches
    current = new_round(len(winners_first) // 2)
    for match in winners_first:
        target = current.matches[match.match_number // 2]
        _route_loser(match, target, feed_slot(match.match_number))

    for winners_round in winners.rounds[1:]:
        intake = new_round(len(winners_round.matches))
        for survivor_match in current.matches:
            _route_winner(survivor_match, intake.matches[survivor_match.match_number], 1)
        for match in winners_round.matches:
            _route_loser(match, intake.matches[match.match_number], 2)
        current = intake

        if winners_round.number < k:
            survivors = new_round(len(intake.matches) // 2)
            for match in intake.matches:
                target = survivors.matches[match.match_number // 2]
                _route_winner(match, target, feed_slot(match.match_number))
            current = survivors

    return losers


def build_grand_final(winners: Bracket, losers: Bracket, match_id: int) -> Bracket:
    """One-match bracket between the winners and losers bracket champions."""
    grand_final = Match(id=match_id, round=1, match_number=0)
    winners_final = winners.final
    grand_final.slot1.source_match_id = winners_final.id
    grand_final.slot1.source_outcome = WINNER
    if losers.final is not None:
        grand_final.slot2.source_match_id = losers.final.id
        grand_final.slot2.source_outcome = WINNER
    else:
        # Two-team bracket: the winners final loser is the losers champion
        grand_final.slot2.source_match_id = winners_final.id
        grand_final.slot2.source_outcome = LOSER
    return Bracket(
        name=GRAND_FINAL_BRACKET,
        rounds=[Round(number=1, name="Grand Final", matches=[grand_final])],
    )


def build_double_elimination(teams: List[Team], max_teams: int) -> List[Bracket]:
    size = bracket_size(len(teams), max_teams)
    winners = build_knockout_bracket(
        WINNERS_BRACKET, size, side=BracketSide.WINNERS, round_prefix="Winners "
    )
    last_id = winners.final.id
    losers = build_losers_bracket(winners, first_id=last_id + 1)
    if losers.matches:
        last_id = losers.matches[-1].id

    grand_final = build_grand_final(winners, losers, match_id=last_id + 1)
    return [winners, losers, grand_final] if losers.rounds else [winners, grand_final]
