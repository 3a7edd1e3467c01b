import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Tournament',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=255)),
                ('bracket_type', models.CharField(choices=[('SINGLE_ELIMINATION', 'Single elimination'), ('DOUBLE_ELIMINATION', 'Double elimination'), ('SWISS', 'Swiss'), ('GROUP_STAGE', 'Group stage'), ('LEADERBOARD', 'Leaderboard')], default='SINGLE_ELIMINATION', max_length=32)),
                ('max_teams', models.PositiveIntegerField(default=16)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('REGISTRATION', 'Registration'), ('IN_PROGRESS', 'In progress'), ('COMPLETED', 'Completed')], default='REGISTRATION', max_length=32)),
                ('start_date', models.DateTimeField(blank=True, null=True)),
                ('end_date', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'ordering': ('-date_created',),
            },
        ),
        migrations.CreateModel(
            name='Team',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=255)),
                ('registered_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='teams', to='tournament.tournament')),
            ],
            options={
                'ordering': ('registered_at', 'id'),
                'unique_together': {('tournament', 'name')},
            },
        ),
        migrations.CreateModel(
            name='Match',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('match_id', models.PositiveIntegerField()),
                ('bracket_name', models.CharField(max_length=64)),
                ('bracket_order', models.PositiveIntegerField(default=0)),
                ('bracket_side', models.CharField(choices=[('WINNERS', 'Winners'), ('LOSERS', 'Losers'), ('NONE', 'None')], default='NONE', max_length=16)),
                ('round', models.PositiveIntegerField()),
                ('round_name', models.CharField(max_length=64)),
                ('match_number', models.PositiveIntegerField()),
                ('group', models.CharField(blank=True, max_length=64)),
                ('slot1_is_bye', models.BooleanField(default=False)),
                ('slot1_source_match_id', models.PositiveIntegerField(blank=True, null=True)),
                ('slot1_source_outcome', models.CharField(blank=True, choices=[('winner', 'Winner'), ('loser', 'Loser')], max_length=8)),
                ('slot2_is_bye', models.BooleanField(default=False)),
                ('slot2_source_match_id', models.PositiveIntegerField(blank=True, null=True)),
                ('slot2_source_outcome', models.CharField(blank=True, choices=[('winner', 'Winner'), ('loser', 'Loser')], max_length=8)),
                ('score1', models.PositiveIntegerField(blank=True, null=True)),
                ('score2', models.PositiveIntegerField(blank=True, null=True)),
                ('is_bye', models.BooleanField(default=False)),
                ('is_draw', models.BooleanField(default=False)),
                ('next_match_id', models.PositiveIntegerField(blank=True, null=True)),
                ('next_slot', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('next_loser_match_id', models.PositiveIntegerField(blank=True, null=True)),
                ('next_loser_slot', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('team1', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.RESTRICT, related_name='+', to='tournament.team')),
                ('team2', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.RESTRICT, related_name='+', to='tournament.team')),
                ('tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='matches', to='tournament.tournament')),
                ('winner', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.RESTRICT, related_name='+', to='tournament.team')),
            ],
            options={
                'verbose_name_plural': 'matches',
                'ordering': ('tournament', 'match_id'),
                'unique_together': {('tournament', 'match_id')},
            },
        ),
    ]
