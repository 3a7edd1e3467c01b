import reversion
from django.db import models
from django.utils import timezone

from bracketeer.bracket_core.structure import BracketSide, BracketType, TournamentStatus

BRACKET_TYPE_OPTIONS = (
    (BracketType.SINGLE_ELIMINATION.value, 'Single elimination'),
    (BracketType.DOUBLE_ELIMINATION.value, 'Double elimination'),
    (BracketType.SWISS.value, 'Swiss'),
    (BracketType.GROUP_STAGE.value, 'Group stage'),
    (BracketType.LEADERBOARD.value, 'Leaderboard'),
)

TOURNAMENT_STATUS_OPTIONS = (
    (TournamentStatus.DRAFT.value, 'Draft'),
    (TournamentStatus.REGISTRATION.value, 'Registration'),
    (TournamentStatus.IN_PROGRESS.value, 'In progress'),
    (TournamentStatus.COMPLETED.value, 'Completed'),
)

BRACKET_SIDE_OPTIONS = (
    (BracketSide.WINNERS.value, 'Winners'),
    (BracketSide.LOSERS.value, 'Losers'),
    (BracketSide.NONE.value, 'None'),
)

SOURCE_OUTCOME_OPTIONS = (
    ('winner', 'Winner'),
    ('loser', 'Loser'),
)

STARTED_STATUSES = (TournamentStatus.IN_PROGRESS.value, TournamentStatus.COMPLETED.value)


# -------------------------------------------------------------------------------
class _BaseModel(models.Model):
    date_created = models.DateTimeField(auto_now_add=True)
    date_modified = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# -------------------------------------------------------------------------------
class Tournament(_BaseModel):
    name = models.CharField(max_length=255)
    bracket_type = models.CharField(
        max_length=32, choices=BRACKET_TYPE_OPTIONS, default=BracketType.SINGLE_ELIMINATION.value
    )
    max_teams = models.PositiveIntegerField(default=16)
    status = models.CharField(
        max_length=32, choices=TOURNAMENT_STATUS_OPTIONS, default=TournamentStatus.REGISTRATION.value
    )
    start_date = models.DateTimeField(blank=True, null=True)
    end_date = models.DateTimeField(blank=True, null=True)
    # Bumped by every bracket save; stale writers are rejected.
    revision = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ('-date_created',)

    @property
    def is_started(self):
        return self.status in STARTED_STATUSES

    def __str__(self):
        return self.name


# -------------------------------------------------------------------------------
class Team(_BaseModel):
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name='teams')
    name = models.CharField(max_length=255)
    registered_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ('registered_at', 'id')
        unique_together = ('tournament', 'name')

    def __str__(self):
        return self.name


# -------------------------------------------------------------------------------
@reversion.register()
class Match(_BaseModel):
    """One node of a tournament's match graph.

    match_id is the graph-level id, unique within the tournament. Slots that
    are fed by another match keep the source reference so the bracket can be
    drawn before the feeding match is decided.
    """
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name='matches')
    match_id = models.PositiveIntegerField()

    bracket_name = models.CharField(max_length=64)
    bracket_order = models.PositiveIntegerField(default=0)
    bracket_side = models.CharField(
        max_length=16, choices=BRACKET_SIDE_OPTIONS, default=BracketSide.NONE.value
    )
    round = models.PositiveIntegerField()
    round_name = models.CharField(max_length=64)
    match_number = models.PositiveIntegerField()
    group = models.CharField(max_length=64, blank=True)

    team1 = models.ForeignKey(Team, blank=True, null=True, on_delete=models.RESTRICT,
                              related_name='+')
    slot1_is_bye = models.BooleanField(default=False)
    slot1_source_match_id = models.PositiveIntegerField(blank=True, null=True)
    slot1_source_outcome = models.CharField(max_length=8, blank=True,
                                            choices=SOURCE_OUTCOME_OPTIONS)
    team2 = models.ForeignKey(Team, blank=True, null=True, on_delete=models.RESTRICT,
                              related_name='+')
    slot2_is_bye = models.BooleanField(default=False)
    slot2_source_match_id = models.PositiveIntegerField(blank=True, null=True)
    slot2_source_outcome = models.CharField(max_length=8, blank=True,
                                            choices=SOURCE_OUTCOME_OPTIONS)

    score1 = models.PositiveIntegerField(blank=True, null=True)
    score2 = models.PositiveIntegerField(blank=True, null=True)
    winner = models.ForeignKey(Team, blank=True, null=True, on_delete=models.RESTRICT,
                               related_name='+')
    is_bye = models.BooleanField(default=False)
    is_draw = models.BooleanField(default=False)

    next_match_id = models.PositiveIntegerField(blank=True, null=True)
    next_slot = models.PositiveSmallIntegerField(blank=True, null=True)
    next_loser_match_id = models.PositiveIntegerField(blank=True, null=True)
    next_loser_slot = models.PositiveSmallIntegerField(blank=True, null=True)

    class Meta:
        ordering = ('tournament', 'match_id')
        unique_together = ('tournament', 'match_id')
        verbose_name_plural = 'matches'

    def __str__(self):
        return '%s - match %d' % (self.tournament, self.match_id)
