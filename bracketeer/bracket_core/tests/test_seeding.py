"""
Tests for entry validation, first-round assignment and the random draw.
"""

import time
import unittest

from bracketeer.bracket_core.exceptions import (
    InsufficientTeams,
    StateConflict,
    UnsupportedFormat,
    ValidationError,
)
from bracketeer.bracket_core.knockout import build_knockout_bracket
from bracketeer.bracket_core.seeding import (
    MAX_BRACKET_SIZE,
    assign_first_round,
    random_draw,
    validate_entrants,
)
from bracketeer.bracket_core.structure import MAIN_BRACKET, BracketType, Team
from bracketeer.bracket_core.topology import TOPOLOGIES, build_brackets, create_match_graph


def make_teams(count):
    return [Team(f"team-{i}", f"T{i}") for i in range(1, count + 1)]


class TestEntryValidation(unittest.TestCase):
    def test_zero_teams_rejected_for_every_format(self):
        for bracket_type in BracketType:
            with self.assertRaises(InsufficientTeams):
                build_brackets(bracket_type, [], 8)

    def test_formats_needing_opponents_reject_a_single_team(self):
        for bracket_type in (
            BracketType.SINGLE_ELIMINATION,
            BracketType.DOUBLE_ELIMINATION,
            BracketType.SWISS,
            BracketType.GROUP_STAGE,
        ):
            with self.assertRaises(InsufficientTeams):
                build_brackets(bracket_type, make_teams(1), 8)
        self.assertEqual(len(build_brackets(BracketType.LEADERBOARD, make_teams(1), 8)), 1)

    def test_max_teams_must_fit_the_field(self):
        with self.assertRaises(UnsupportedFormat):
            validate_entrants(make_teams(5), 4)
        with self.assertRaises(UnsupportedFormat):
            validate_entrants(make_teams(2), 0)
        with self.assertRaises(UnsupportedFormat):
            validate_entrants(make_teams(2), "eight")

    def test_max_teams_is_capped(self):
        validate_entrants(make_teams(2), MAX_BRACKET_SIZE)
        for bracket_type in BracketType:
            with self.assertRaises(UnsupportedFormat):
                create_match_graph("cup", bracket_type, make_teams(2), MAX_BRACKET_SIZE + 1)
        with self.assertRaises(UnsupportedFormat):
            create_match_graph("cup", BracketType.SINGLE_ELIMINATION, make_teams(2), 2 ** 17)

    def test_largest_bracket_builds_quickly(self):
        started = time.monotonic()
        graph = create_match_graph(
            "cup", BracketType.DOUBLE_ELIMINATION, make_teams(2), MAX_BRACKET_SIZE
        )
        self.assertEqual(len(graph.all_matches()), 2 * MAX_BRACKET_SIZE - 2)
        winners_final = graph.get_match(MAX_BRACKET_SIZE - 1)
        self.assertTrue(winners_final.slot2.is_bye)
        self.assertFalse(winners_final.slot1.is_resolved)
        self.assertLess(time.monotonic() - started, 10)

    def test_duplicate_team_ids_rejected(self):
        teams = make_teams(2) + [Team("team-1", "Impostor")]
        with self.assertRaises(ValidationError):
            validate_entrants(teams, 8)

    def test_unknown_format_rejected(self):
        with self.assertRaises(UnsupportedFormat):
            build_brackets("ROUND_ROBIN_PLUS", make_teams(4), 4)

    def test_format_names_are_case_insensitive(self):
        self.assertEqual(len(build_brackets("double_elimination", make_teams(4), 4)), 3)

    def test_every_format_has_a_topology(self):
        self.assertEqual(set(TOPOLOGIES), set(BracketType))


class TestFirstRoundAssignment(unittest.TestCase):
    def test_registration_order(self):
        bracket = build_knockout_bracket(MAIN_BRACKET, 8)
        teams = make_teams(8)
        assign_first_round(bracket, teams)
        for index, team in enumerate(teams):
            match = bracket.rounds[0].matches[index // 2]
            slot = match.slot1 if index % 2 == 0 else match.slot2
            self.assertEqual(slot.team, team)

    def test_trailing_slots_become_byes(self):
        bracket = build_knockout_bracket(MAIN_BRACKET, 8)
        assign_first_round(bracket, make_teams(5))
        first_round = bracket.rounds[0].matches
        self.assertFalse(first_round[2].slot1.is_bye)
        self.assertTrue(first_round[2].slot2.is_bye)
        self.assertTrue(first_round[3].slot1.is_bye)
        self.assertTrue(first_round[3].slot2.is_bye)

    def test_assignment_is_idempotent(self):
        bracket = build_knockout_bracket(MAIN_BRACKET, 8)
        teams = make_teams(6)
        assign_first_round(bracket, teams)
        before = bracket.to_dict()
        assign_first_round(bracket, teams)
        self.assertEqual(bracket.to_dict(), before)

    def test_reassignment_with_different_teams_conflicts(self):
        bracket = build_knockout_bracket(MAIN_BRACKET, 4)
        teams = make_teams(4)
        assign_first_round(bracket, teams)
        with self.assertRaises(StateConflict):
            assign_first_round(bracket, list(reversed(teams)))

    def test_too_many_teams(self):
        bracket = build_knockout_bracket(MAIN_BRACKET, 4)
        with self.assertRaises(ValidationError):
            assign_first_round(bracket, make_teams(5))


class TestRandomDraw(unittest.TestCase):
    def test_seeded_draw_is_reproducible(self):
        teams = make_teams(16)
        self.assertEqual(random_draw(teams, seed=7), random_draw(teams, seed=7))
        self.assertEqual(sorted(random_draw(teams, seed=7), key=lambda t: t.id),
                         sorted(teams, key=lambda t: t.id))
        self.assertEqual(teams, make_teams(16))

    def test_shuffled_graph_keeps_registration_list(self):
        teams = make_teams(8)
        graph = create_match_graph("draw", BracketType.SINGLE_ELIMINATION, teams, 8,
                                   shuffle=True, seed=3)
        self.assertEqual(graph.teams, teams)
        placed = [t for m in graph.bracket(MAIN_BRACKET).rounds[0].matches for t in m.teams]
        self.assertEqual(placed, random_draw(teams, seed=3))


if __name__ == "__main__":
    unittest.main()
