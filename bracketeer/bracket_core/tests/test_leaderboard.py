"""
Tests for leaderboard tournaments.
"""

import unittest

from bracketeer.bracket_core.assertions import assert_bracket, assert_standings
from bracketeer.bracket_core.builder import BracketBuilder
from bracketeer.bracket_core.exceptions import NotFound, StateConflict, ValidationError
from bracketeer.bracket_core.leaderboard import finish_leaderboard, record_leaderboard_result
from bracketeer.bracket_core.structure import LEADERBOARD_BRACKET, MatchState


class TestLeaderboard(unittest.TestCase):
    def setUp(self):
        self.builder = BracketBuilder().teams("Alpha", "Bravo", "Charlie").leaderboard()
        self.graph = self.builder.graph

    def test_starts_empty_with_zeroed_standings(self):
        self.assertEqual(self.graph.all_matches(), [])
        standings = assert_standings(self.graph).standings
        self.assertEqual([s.team.name for s in standings], ["Alpha", "Bravo", "Charlie"])
        self.assertTrue(all(s.points == 0 and s.played == 0 for s in standings))

    def test_results_are_appended_decided(self):
        self.builder.leaderboard_result("Alpha", "Bravo", winner="Alpha", score1=3, score2=1)
        self.builder.leaderboard_result("Charlie", "Alpha", winner="Charlie")
        self.builder.leaderboard_result("Bravo", "Charlie")

        matches = self.graph.matches_in(LEADERBOARD_BRACKET)
        self.assertEqual([m.id for m in matches], [1, 2, 3])
        self.assertEqual([m.match_number for m in matches], [0, 1, 2])
        self.assertTrue(all(m.state is MatchState.DECIDED for m in matches))
        self.assertEqual(self.graph.bracket(LEADERBOARD_BRACKET).rounds[0].name, "Results")
        assert_bracket(self.graph).match(3).is_draw()

        (
            assert_standings(self.graph)
            .order("Charlie", "Alpha", "Bravo")
            .team("Charlie").points(4).wins(1).draws(1)
            .team("Alpha").points(3).wins(1).losses(1)
            .team("Bravo").points(1)
        )

    def test_wins_break_ties_then_name(self):
        self.builder.leaderboard_result("Charlie", "Bravo", winner="Charlie")
        self.builder.leaderboard_result("Alpha", "Bravo", winner="Alpha")
        assert_standings(self.graph).order("Alpha", "Charlie", "Bravo")

    def test_invalid_results(self):
        alpha = self.builder.name_to_id["Alpha"]
        bravo = self.builder.name_to_id["Bravo"]
        charlie = self.builder.name_to_id["Charlie"]
        with self.assertRaises(ValidationError):
            record_leaderboard_result(self.graph, alpha, alpha, 1, 0, alpha)
        with self.assertRaises(ValidationError):
            record_leaderboard_result(self.graph, alpha, bravo, 1, 0, charlie)
        with self.assertRaises(ValidationError):
            record_leaderboard_result(self.graph, alpha, bravo, -1, 0, alpha)
        with self.assertRaises(NotFound):
            record_leaderboard_result(self.graph, alpha, "ghost", 1, 0, alpha)
        self.assertEqual(self.graph.all_matches(), [])

    def test_completes_only_when_finished(self):
        self.builder.leaderboard_result("Alpha", "Bravo", winner="Alpha")
        assert_bracket(self.graph).completed(False)
        finish_leaderboard(self.graph)
        assert_bracket(self.graph).completed()
        with self.assertRaises(StateConflict):
            self.builder.leaderboard_result("Alpha", "Charlie", winner="Alpha")
        with self.assertRaises(StateConflict):
            finish_leaderboard(self.graph)

    def test_single_team_leaderboard(self):
        graph = BracketBuilder().team("Solo").leaderboard().build()
        self.assertEqual(len(graph.teams), 1)

    def test_only_for_leaderboards(self):
        graph = BracketBuilder().numbered_teams(4).single_elimination().build()
        with self.assertRaises(ValidationError):
            record_leaderboard_result(graph, "team-1", "team-2", 1, 0, "team-1")


if __name__ == "__main__":
    unittest.main()
