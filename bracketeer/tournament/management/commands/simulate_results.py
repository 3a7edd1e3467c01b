"""
Management command to play out a started tournament with random results.

Ready matches are decided one at a time through the engine, so routing,
byes and completion behave exactly as they do for reported results. Swiss
rounds are paired as soon as the previous round is decided, and leaderboards
get a number of random results before being finished.
"""

import random

from django.core.management.base import BaseCommand, CommandError

from bracketeer.bracket_core.advancement import is_complete
from bracketeer.bracket_core.exceptions import BracketError
from bracketeer.bracket_core.structure import BracketType, MatchState
from bracketeer.tournament.services import get_engine


class Command(BaseCommand):
    help = "Report random results for a started tournament until it completes"

    def add_arguments(self, parser):
        parser.add_argument(
            "tournament_id",
            type=int,
            help="Tournament ID to simulate",
        )
        parser.add_argument(
            "--seed",
            type=int,
            help="Random seed for reproducible results",
        )
        parser.add_argument(
            "--draw-rate",
            type=float,
            default=0.1,
            help="Probability of a draw where the format allows it (default: 0.1)",
        )
        parser.add_argument(
            "--leaderboard-results",
            type=int,
            help="Results to record for leaderboards (default: one per team)",
        )

    def handle(self, *args, **options):
        tournament_id = str(options["tournament_id"])
        rng = random.Random(options["seed"])
        engine = get_engine()

        try:
            graph = engine.bracket(tournament_id)
            if graph.bracket_type is BracketType.LEADERBOARD:
                reported = self._simulate_leaderboard(engine, graph, rng, options)
            else:
                reported = self._simulate_matches(engine, tournament_id, rng, options["draw_rate"])
            graph = engine.bracket(tournament_id)
        except BracketError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS(f"✓ Reported {reported} results"))
        if graph.champion is not None:
            self.stdout.write(f"Champion: {graph.champion.name}")
        elif is_complete(graph):
            leader = engine.standings(tournament_id)[0]
            self.stdout.write(f"Leader: {leader.team.name} ({leader.points} points)")
        else:
            self.stdout.write(self.style.WARNING("Tournament is not complete"))

    def _random_result(self, rng, team1_id, team2_id, draw_rate, allows_draws):
        if allows_draws and rng.random() < draw_rate:
            score = rng.randint(0, 3)
            return score, score, None
        winning = rng.randint(1, 5)
        losing = rng.randint(0, winning - 1)
        if rng.random() < 0.5:
            return winning, losing, team1_id
        return losing, winning, team2_id

    def _simulate_matches(self, engine, tournament_id, rng, draw_rate):
        reported = 0
        while True:
            graph = engine.bracket(tournament_id)
            ready = [m for m in graph.all_matches() if m.state is MatchState.READY]
            if ready:
                match = ready[0]
                score1, score2, winner_id = self._random_result(
                    rng, match.team1.id, match.team2.id, draw_rate,
                    graph.bracket_type.allows_draws,
                )
                engine.report_result(tournament_id, match.id, score1, score2, winner_id)
                reported += 1
            elif graph.bracket_type is BracketType.SWISS and not is_complete(graph):
                new_round = engine.generate_next_swiss_round(tournament_id)
                self.stdout.write(f"Paired {new_round.name}")
            else:
                return reported

    def _simulate_leaderboard(self, engine, graph, rng, options):
        if graph.finished:
            return 0
        count = options["leaderboard_results"] or len(graph.teams)
        if len(graph.teams) < 2:
            count = 0
        for _ in range(count):
            team1, team2 = rng.sample(graph.teams, 2)
            score1, score2, winner_id = self._random_result(
                rng, team1.id, team2.id, options["draw_rate"], True
            )
            engine.record_leaderboard_result(
                graph.tournament_id, team1.id, team2.id, score1, score2, winner_id
            )
        engine.finish_tournament(graph.tournament_id)
        return count
