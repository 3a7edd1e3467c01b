"""
Management command to seed a bracket tournament:
- Any of the five formats
- Configurable number of generated teams (Faker names)
- Optionally start the tournament right away, with an optional random draw
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from faker import Faker

from bracketeer.bracket_core.exceptions import BracketError
from bracketeer.bracket_core.structure import BracketType
from bracketeer.tournament.models import Team, Tournament
from bracketeer.tournament.services import get_engine


class Command(BaseCommand):
    help = "Seed a bracket tournament with generated teams"

    def add_arguments(self, parser):
        parser.add_argument(
            "--bracket-type",
            choices=[t.value for t in BracketType],
            default=BracketType.SINGLE_ELIMINATION.value,
            help="Tournament format (default: SINGLE_ELIMINATION)",
        )
        parser.add_argument(
            "--teams",
            type=int,
            default=8,
            help="Number of teams to register (default: 8)",
        )
        parser.add_argument(
            "--max-teams",
            type=int,
            help="Tournament capacity (default: the number of teams)",
        )
        parser.add_argument(
            "--name",
            type=str,
            help="Tournament name (default: a generated one)",
        )
        parser.add_argument(
            "--start",
            action="store_true",
            help="Build the bracket after registering the teams",
        )
        parser.add_argument(
            "--shuffle",
            action="store_true",
            help="Randomly draw the first-round slots instead of using registration order",
        )
        parser.add_argument(
            "--seed",
            type=int,
            help="Random seed for team names and the draw",
        )

    def handle(self, *args, **options):
        teams_count = options["teams"]
        max_teams = options["max_teams"] or teams_count
        bracket_type = options["bracket_type"]

        if teams_count < 1:
            raise CommandError("At least one team is required")
        if max_teams < teams_count:
            raise CommandError(
                f"Capacity ({max_teams}) is smaller than the number of teams ({teams_count})"
            )

        fake = Faker()
        if options["seed"] is not None:
            Faker.seed(options["seed"])

        name = options["name"] or f"{fake.city()} {fake.word().title()} Cup"

        with transaction.atomic():
            tournament = Tournament.objects.create(
                name=name, bracket_type=bracket_type, max_teams=max_teams
            )
            for _ in range(teams_count):
                Team.objects.create(tournament=tournament, name=self._team_name(fake))

        self.stdout.write(
            self.style.SUCCESS(f"✓ Created tournament {tournament.pk}: {tournament.name}")
        )
        self.stdout.write(f"  - Format: {bracket_type}")
        self.stdout.write(f"  - {teams_count} teams, capacity {max_teams}")

        if options["start"]:
            try:
                graph = get_engine().start_tournament(
                    str(tournament.pk),
                    bracket_type,
                    max_teams,
                    shuffle=options["shuffle"],
                    seed=options["seed"],
                )
            except BracketError as e:
                raise CommandError(f"Could not start tournament: {e}")
            self.stdout.write(
                self.style.SUCCESS(f"✓ Bracket generated with {len(graph.all_matches())} matches")
            )

    def _team_name(self, fake):
        return f"{fake.unique.city()} {fake.color_name()}s"
