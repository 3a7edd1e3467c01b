"""
Tests for double elimination: losers bracket wiring, Grand Final readiness,
and the elimination law.
"""

import unittest

from bracketeer.bracket_core import advancement
from bracketeer.bracket_core.assertions import assert_bracket
from bracketeer.bracket_core.builder import BracketBuilder
from bracketeer.bracket_core.double_elimination import losers_round_count
from bracketeer.bracket_core.structure import (
    GRAND_FINAL_BRACKET,
    LOSERS_BRACKET,
    WINNERS_BRACKET,
    BracketSide,
    EntrantStatus,
    MatchState,
)


class TestDoubleEliminationStructure(unittest.TestCase):
    def test_losers_round_count(self):
        self.assertEqual(losers_round_count(1), 0)
        self.assertEqual(losers_round_count(2), 2)
        self.assertEqual(losers_round_count(3), 4)
        self.assertEqual(losers_round_count(4), 6)

    def test_eight_team_layout(self):
        graph = BracketBuilder().numbered_teams(8).double_elimination().build()

        assert_bracket(graph).match_count(7, WINNERS_BRACKET)
        assert_bracket(graph).match_count(6, LOSERS_BRACKET)
        assert_bracket(graph).match_count(1, GRAND_FINAL_BRACKET)
        self.assertEqual(len(graph.bracket(LOSERS_BRACKET).rounds), 4)

        # Winners round 1 losers pair up in losers round 1
        assert_bracket(graph).match(1).drops_to(8, 1)
        assert_bracket(graph).match(2).drops_to(8, 2)
        assert_bracket(graph).match(3).drops_to(9, 1)
        assert_bracket(graph).match(4).drops_to(9, 2)
        # Later winners losers enter intake rounds in slot2
        assert_bracket(graph).match(5).drops_to(10, 2)
        assert_bracket(graph).match(6).drops_to(11, 2)
        assert_bracket(graph).match(7).drops_to(13, 2).feeds(None)
        # Losers survivors advance in slot1 of the intake rounds
        assert_bracket(graph).match(8).feeds(10, 1)
        assert_bracket(graph).match(9).feeds(11, 1)
        assert_bracket(graph).match(10).feeds(12, 1)
        assert_bracket(graph).match(11).feeds(12, 2)
        assert_bracket(graph).match(12).feeds(13, 1)
        assert_bracket(graph).match(13).feeds(None).drops_to(None)

        self.assertEqual(graph.winners_final.id, 7)
        self.assertEqual(graph.losers_final.id, 13)
        self.assertEqual(graph.grand_final.id, 14)
        self.assertEqual(graph.get_match(8).bracket_side, BracketSide.LOSERS)
        self.assertEqual(graph.get_match(1).bracket_side, BracketSide.WINNERS)

        grand_final = graph.grand_final
        self.assertFalse(grand_final.slot1.is_resolved)
        self.assertEqual(grand_final.slot1.label(), "Winner of match 7")
        self.assertEqual(grand_final.slot2.label(), "Winner of match 13")

    def test_round_names(self):
        graph = BracketBuilder().numbered_teams(8).double_elimination().build()
        self.assertEqual(
            [r.name for r in graph.bracket(WINNERS_BRACKET).rounds],
            ["Winners Quarterfinal", "Winners Semifinal", "Winners Final"],
        )
        self.assertEqual(
            [r.name for r in graph.bracket(LOSERS_BRACKET).rounds],
            ["Losers Round 1", "Losers Round 2", "Losers Round 3", "Losers Final"],
        )


class TestDoubleEliminationAdvancement(unittest.TestCase):
    def test_four_team_run(self):
        builder = BracketBuilder().numbered_teams(4).double_elimination()
        graph = builder.graph

        builder.result("T1", "T2").result("T3", "T4")
        assert_bracket(graph).team("T2").status(EntrantStatus.LOSERS_ENTRANT).losses(1)
        assert_bracket(graph).match(3).has_teams("T1", "T3").is_ready()
        assert_bracket(graph).match(4).has_teams("T2", "T4").is_ready()

        builder.result("T1", "T3")
        assert_bracket(graph).match(5).has_teams(None, "T3")
        assert_bracket(graph).match(6).is_pending()

        builder.result("T2", "T4")
        assert_bracket(graph).team("T4").status(EntrantStatus.ELIMINATED).losses(2)
        assert_bracket(graph).match(5).has_teams("T2", "T3").is_ready()
        assert_bracket(graph).match(6).is_pending()

        info = advancement.report_result(graph, 5, 2, 1, "team-3")
        self.assertTrue(info.grand_final_ready)
        self.assertIn(info.loser, info.eliminated)
        assert_bracket(graph).match(6).has_teams("T1", "T3").is_ready()
        assert_bracket(graph).completed(False)

        builder.result("T1", "T3")
        assert_bracket(graph).completed().champion("T1")
        assert_bracket(graph).team("T3").status(EntrantStatus.ELIMINATED).losses(2)
        assert_bracket(graph).team("T1").status(EntrantStatus.CHAMPION).losses(0)

    def test_grand_final_waits_for_both_finals(self):
        builder = BracketBuilder().numbered_teams(4).double_elimination()
        builder.result("T1", "T2").result("T3", "T4").result("T2", "T4")
        assert_bracket(builder.graph).match(6).is_pending()
        builder.result("T3", "T1")
        assert_bracket(builder.graph).match(6).is_pending()
        builder.result("T1", "T2")
        assert_bracket(builder.graph).match(6).has_teams("T3", "T1").is_ready()

    def test_winners_champion_losing_grand_final_is_eliminated(self):
        builder = BracketBuilder().numbered_teams(4).double_elimination()
        builder.result("T1", "T2").result("T3", "T4").result("T1", "T3")
        builder.result("T2", "T4").result("T3", "T2").result("T3", "T1")
        assert_bracket(builder.graph).completed().champion("T3")
        assert_bracket(builder.graph).team("T1").status(EntrantStatus.ELIMINATED).losses(1)
        assert_bracket(builder.graph).team("T3").status(EntrantStatus.CHAMPION).losses(1)

    def test_two_team_bracket_replays_in_grand_final(self):
        builder = BracketBuilder().teams("Alpha", "Bravo").double_elimination()
        graph = builder.graph
        self.assertIsNone(graph.losers_final)
        assert_bracket(graph).match_count(2)

        builder.result("Alpha", "Bravo")
        assert_bracket(graph).team("Bravo").status(EntrantStatus.LOSERS_ENTRANT)
        assert_bracket(graph).match(2).has_teams("Alpha", "Bravo").is_ready()

        builder.result("Bravo", "Alpha")
        assert_bracket(graph).completed().champion("Bravo")
        assert_bracket(graph).team("Alpha").status(EntrantStatus.ELIMINATED)

    def test_three_teams_with_bye(self):
        builder = BracketBuilder().numbered_teams(3).double_elimination()
        graph = builder.graph
        assert_bracket(graph).match(2).is_bye().winner("T3")
        assert_bracket(graph).match(4).has_teams(None, None).is_pending()

        builder.result("T1", "T2")
        # T2's losers round 1 opponent is a bye, so T2 goes straight to the losers final
        assert_bracket(graph).match(4).is_bye().winner("T2")
        assert_bracket(graph).match(5).has_teams("T2", None)

        builder.result("T3", "T1")
        assert_bracket(graph).match(5).has_teams("T2", "T1").is_ready()
        builder.result("T1", "T2")
        assert_bracket(graph).match(6).has_teams("T3", "T1").is_ready()
        builder.result("T3", "T1")
        assert_bracket(graph).completed().champion("T3")

    def test_elimination_law_over_full_bracket(self):
        """Every eliminated team has two losses, or one loss in the Grand Final."""
        builder = BracketBuilder().numbered_teams(8).double_elimination()
        graph = builder.graph
        while not advancement.is_complete(graph):
            ready = [m for m in graph.all_matches() if m.state is MatchState.READY]
            self.assertTrue(ready, "bracket stalled before completion")
            match = min(ready, key=lambda m: m.id)
            advancement.report_result(graph, match.id, 1, 0, match.team1.id)
            graph.check_invariants()

        grand_final = graph.grand_final
        for team in graph.teams:
            losses = graph.losses_of(team.id)
            status = graph.status_of(team.id)
            if status is EntrantStatus.ELIMINATED:
                self.assertTrue(
                    len(losses) == 2 or (len(losses) == 1 and losses[0].id == grand_final.id),
                    f"{team.name} eliminated with {len(losses)} losses",
                )
            else:
                self.assertIs(status, EntrantStatus.CHAMPION)
                self.assertLessEqual(len(losses), 1)

        self.assertEqual(len(graph.all_matches()), 14)

    def test_rebuilt_statuses_match_incremental_marking(self):
        builder = BracketBuilder().numbered_teams(4).double_elimination()
        builder.result("T1", "T2").result("T3", "T4").result("T1", "T3").result("T2", "T4")
        graph = builder.graph
        incremental = dict(graph.statuses)
        graph.rebuild_statuses()
        self.assertEqual(graph.statuses, incremental)


if __name__ == "__main__":
    unittest.main()
