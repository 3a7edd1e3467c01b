from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from bracketeer.tournament.models import Match, Tournament
from bracketeer.tournament.services import get_engine
from bracketeer.tournament.tests.testutils import create_tournament


class SeedBracketTournamentTestCase(TestCase):
    def test_seed_without_start(self):
        out = StringIO()
        call_command('seed_bracket_tournament', '--teams', '6', '--seed', '1', stdout=out)
        tournament = Tournament.objects.get()
        self.assertEqual(tournament.teams.count(), 6)
        self.assertEqual(tournament.status, 'REGISTRATION')
        self.assertEqual(len(set(tournament.teams.values_list('name', flat=True))), 6)
        self.assertIn('Created tournament', out.getvalue())

    def test_seed_and_start(self):
        call_command(
            'seed_bracket_tournament', '--teams', '5', '--max-teams', '8',
            '--bracket-type', 'DOUBLE_ELIMINATION', '--start', '--shuffle', '--seed', '3',
            stdout=StringIO(),
        )
        tournament = Tournament.objects.get()
        self.assertEqual(tournament.status, 'IN_PROGRESS')
        self.assertEqual(tournament.bracket_type, 'DOUBLE_ELIMINATION')
        self.assertEqual(Match.objects.filter(tournament=tournament).count(), 14)

    def test_capacity_must_fit(self):
        with self.assertRaises(CommandError):
            call_command('seed_bracket_tournament', '--teams', '6', '--max-teams', '4',
                         stdout=StringIO())


class SimulateResultsTestCase(TestCase):
    def simulate(self, tournament, *args):
        out = StringIO()
        call_command('simulate_results', str(tournament.pk), '--seed', '11', *args, stdout=out)
        tournament.refresh_from_db()
        return out.getvalue()

    def start(self, tournament):
        get_engine().start_tournament(str(tournament.pk), tournament.bracket_type,
                                      tournament.max_teams)

    def test_every_format_runs_to_completion(self):
        for bracket_type, team_count in (
            ('SINGLE_ELIMINATION', 6),
            ('DOUBLE_ELIMINATION', 8),
            ('SWISS', 5),
            ('GROUP_STAGE', 7),
            ('LEADERBOARD', 4),
        ):
            with self.subTest(bracket_type=bracket_type):
                tournament = create_tournament(team_count, bracket_type=bracket_type,
                                               name=f'{bracket_type} cup')
                self.start(tournament)
                output = self.simulate(tournament)
                self.assertEqual(tournament.status, 'COMPLETED')
                self.assertIn('Reported', output)
                self.assertNotIn('not complete', output)

    def test_elimination_crowns_a_champion(self):
        tournament = create_tournament(4, bracket_type='DOUBLE_ELIMINATION')
        self.start(tournament)
        output = self.simulate(tournament)
        self.assertIn('Champion:', output)

    def test_unstarted_tournament(self):
        tournament = create_tournament(4)
        with self.assertRaises(CommandError):
            self.simulate(tournament)
