"""
Tests for Swiss round generation and pairing.
"""

import unittest
from itertools import combinations

from bracketeer.bracket_core import advancement
from bracketeer.bracket_core.assertions import assert_bracket, assert_standings
from bracketeer.bracket_core.builder import BracketBuilder
from bracketeer.bracket_core.exceptions import StateConflict, ValidationError
from bracketeer.bracket_core.structure import SWISS_BRACKET, MatchState, Team
from bracketeer.bracket_core.swiss import generate_next_swiss_round, pair_teams, swiss_round_count


def _pairs(round):
    return [
        (m.team1.name, m.team2.name if m.team2 else None)
        for m in round.matches
    ]


class TestSwissRoundCount(unittest.TestCase):
    def test_round_count(self):
        self.assertEqual(swiss_round_count(2), 3)
        self.assertEqual(swiss_round_count(4), 4)
        self.assertEqual(swiss_round_count(5), 5)
        self.assertEqual(swiss_round_count(8), 5)
        self.assertEqual(swiss_round_count(64), 5)


class TestSwissPairing(unittest.TestCase):
    def test_first_round_in_registration_order(self):
        graph = BracketBuilder().teams("A", "B", "C", "D").swiss().build()
        rounds = graph.bracket(SWISS_BRACKET).rounds
        self.assertEqual(len(rounds), 1)
        self.assertEqual(_pairs(rounds[0]), [("A", "B"), ("C", "D")])

    def test_odd_team_count_gives_last_team_a_bye(self):
        graph = BracketBuilder().teams("A", "B", "C").swiss().build()
        assert_bracket(graph).match(1).has_teams("A", "B").is_ready()
        assert_bracket(graph).match(2).has_teams("C", None).is_bye().winner("C")

    def test_next_round_pairs_by_score_without_repeats(self):
        builder = BracketBuilder().teams("A", "B", "C", "D").swiss()
        builder.result("A", "B").result("C", "D")
        builder.next_swiss_round()
        round2 = builder.graph.bracket(SWISS_BRACKET).rounds[1]
        self.assertEqual(round2.name, "Round 2")
        self.assertEqual(_pairs(round2), [("A", "C"), ("B", "D")])
        self.assertEqual([m.id for m in round2.matches], [3, 4])

        builder.result("A", "C").result("B", "D")
        builder.next_swiss_round()
        round3 = builder.graph.bracket(SWISS_BRACKET).rounds[2]
        self.assertEqual(_pairs(round3), [("A", "D"), ("B", "C")])

    def test_bye_rotates_to_lowest_ranked_without_bye(self):
        builder = BracketBuilder().teams("A", "B", "C").swiss()
        builder.result("A", "B")
        builder.next_swiss_round()
        round2 = builder.graph.bracket(SWISS_BRACKET).rounds[1]
        self.assertEqual(_pairs(round2), [("A", "C"), ("B", None)])
        assert_bracket(builder.graph).match(4).is_bye().winner("B")

    def test_previous_round_must_be_decided(self):
        builder = BracketBuilder().teams("A", "B", "C", "D").swiss()
        builder.result("A", "B")
        with self.assertRaises(ValidationError):
            generate_next_swiss_round(builder.graph)

    def test_round_limit(self):
        builder = BracketBuilder().teams("A", "B").swiss()
        for _ in range(2):
            builder.result("A", "B").next_swiss_round()
        builder.result("B", "A")
        assert_bracket(builder.graph).completed()
        with self.assertRaises(StateConflict):
            generate_next_swiss_round(builder.graph)

    def test_repeat_only_when_unavoidable(self):
        teams = [Team(name, name) for name in "ABCD"]
        points = {t.id: 0 for t in teams}
        met = {frozenset(pair) for pair in combinations("ABCD", 2)}
        # Every pairing is a repeat; fall back to adjacent pairs
        pairs = pair_teams(teams, points, met)
        self.assertEqual([(a.id, b.id) for a, b in pairs], [("A", "B"), ("C", "D")])

        met = {frozenset("AB"), frozenset("CD")}
        pairs = pair_teams(teams, points, met)
        self.assertEqual([(a.id, b.id) for a, b in pairs], [("A", "C"), ("B", "D")])

    def test_draws_are_allowed(self):
        builder = BracketBuilder().teams("A", "B", "C", "D").swiss()
        builder.draw("A", "B")
        assert_bracket(builder.graph).match(1).is_draw().winner(None)
        assert_standings(builder.graph).team("A").points(1).draws(1)


class TestSwissTournament(unittest.TestCase):
    def test_full_eight_team_event_has_no_repeats(self):
        builder = BracketBuilder().numbered_teams(8).swiss()
        graph = builder.graph
        planned = swiss_round_count(8)

        for round_number in range(1, planned + 1):
            if round_number > 1:
                generate_next_swiss_round(graph)
            for match in graph.bracket(SWISS_BRACKET).rounds[-1].matches:
                if match.state is MatchState.READY:
                    advancement.report_result(graph, match.id, 1, 0, match.team1.id)

        assert_bracket(graph).completed()
        seen = set()
        for match in graph.matches_in(SWISS_BRACKET):
            pair = frozenset((match.team1.id, match.team2.id))
            self.assertNotIn(pair, seen)
            seen.add(pair)
        self.assertEqual(len(graph.bracket(SWISS_BRACKET).rounds), 5)


if __name__ == "__main__":
    unittest.main()
