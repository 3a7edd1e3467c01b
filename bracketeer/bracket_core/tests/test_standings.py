"""
Tests for standings calculation and tie-break metrics.
"""

import unittest

from bracketeer.bracket_core.assertions import assert_standings
from bracketeer.bracket_core.builder import BracketBuilder
from bracketeer.bracket_core.scoring import TWO_ONE_ZERO_SCORING, ScoringSystem
from bracketeer.bracket_core.standings import compute_standings
from bracketeer.bracket_core.structure import SWISS_BRACKET


class TestScoringSystem(unittest.TestCase):
    def test_points(self):
        scoring = ScoringSystem()
        self.assertEqual(scoring.points(True), 3)
        self.assertEqual(scoring.points(False), 0)
        self.assertEqual(scoring.points(False, draw=True), 1)
        self.assertEqual(TWO_ONE_ZERO_SCORING.points(True), 2)


class TestSwissStandings(unittest.TestCase):
    def setUp(self):
        self.builder = BracketBuilder().teams("A", "B", "C", "D").swiss()
        self.builder.result("A", "B").result("C", "D").next_swiss_round()
        self.builder.result("A", "C").result("B", "D")
        self.graph = self.builder.build()

    def test_points_and_buchholz(self):
        (
            assert_standings(self.graph, SWISS_BRACKET)
            .order("A", "B", "C", "D")
            .team("A").rank(1).points(6).wins(2).tiebreak(6)
            .team("B").rank(2).points(3).tiebreak(6)
            .team("C").rank(3).points(3).tiebreak(6)
            .team("D").rank(4).points(0).losses(2).tiebreak(6)
        )

    def test_only_decided_matches_count(self):
        self.builder.next_swiss_round()
        standings = compute_standings(self.graph, SWISS_BRACKET)
        self.assertEqual(sum(s.played for s in standings), 8)

    def test_bye_counts_as_a_win(self):
        graph = BracketBuilder().teams("A", "B", "C").swiss().result("A", "B").build()
        (
            assert_standings(graph)
            .order("A", "C", "B")
            .team("C").points(3).wins(1).played(1).tiebreak(0)
            .team("B").tiebreak(3)
        )

    def test_custom_scoring(self):
        graph = BracketBuilder().teams("A", "B", "C").swiss().result("A", "B").build()
        assert_standings(graph, scoring=TWO_ONE_ZERO_SCORING).team("A").points(2)


class TestStandingsDeterminism(unittest.TestCase):
    def test_repeated_calls_agree(self):
        builder = BracketBuilder().numbered_teams(8).swiss()
        for name in ("T1", "T3", "T6", "T8"):
            builder.result(name)
        graph = builder.build()
        first = compute_standings(graph)
        for _ in range(5):
            self.assertEqual(compute_standings(graph.copy()), first)

    def test_name_then_id_breaks_full_ties(self):
        graph = (
            BracketBuilder()
            .team("Zulu").team("Echo").team("Mike")
            .leaderboard()
            .build()
        )
        self.assertEqual([s.team.name for s in compute_standings(graph)], ["Echo", "Mike", "Zulu"])
        self.assertEqual([s.rank for s in compute_standings(graph)], [1, 2, 3])

    def test_elimination_byes_do_not_score(self):
        graph = BracketBuilder().numbered_teams(3).single_elimination().build()
        standing = {s.team.name: s for s in compute_standings(graph)}
        self.assertEqual(standing["T3"].played, 0)
        self.assertEqual(standing["T3"].points, 0)


if __name__ == "__main__":
    unittest.main()
