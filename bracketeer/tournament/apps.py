from django.apps import AppConfig


class TournamentConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bracketeer.tournament'
    verbose_name = 'Bracket Tournaments'

    def ready(self):
        from bracketeer.tournament import signals  # noqa: F401
