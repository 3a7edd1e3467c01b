from django.apps import AppConfig


class BracketCoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bracketeer.bracket_core'
    verbose_name = 'Bracket Engine Core'
