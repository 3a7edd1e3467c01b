from django import forms

from bracketeer.bracket_core.exceptions import ValidationError
from bracketeer.bracket_core.seeding import MAX_BRACKET_SIZE


class _ApiForm(forms.Form):
    """Forms fed from decoded JSON bodies instead of POST data."""

    def cleaned_or_raise(self):
        if not self.is_valid():
            raise ValidationError(
                '; '.join(
                    f'{field}: {" ".join(errors)}' for field, errors in self.errors.items()
                )
            )
        return self.cleaned_data

    def clean_winnerId(self):
        return self.cleaned_data.get('winnerId') or None


class MatchResultForm(_ApiForm):
    score1 = forms.IntegerField(required=False, min_value=0)
    score2 = forms.IntegerField(required=False, min_value=0)
    winnerId = forms.CharField(required=False)


class LeaderboardResultForm(_ApiForm):
    team1Id = forms.CharField()
    team2Id = forms.CharField()
    score1 = forms.IntegerField(required=False, min_value=0)
    score2 = forms.IntegerField(required=False, min_value=0)
    winnerId = forms.CharField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('team1Id') and cleaned_data.get('team1Id') == cleaned_data.get('team2Id'):
            raise forms.ValidationError('A team cannot play itself')
        return cleaned_data


class StartTournamentForm(_ApiForm):
    # Defaults come from the tournament row
    bracketType = forms.CharField(required=False)
    maxTeams = forms.IntegerField(required=False, min_value=1, max_value=MAX_BRACKET_SIZE)
    shuffle = forms.BooleanField(required=False)
    seed = forms.IntegerField(required=False)
