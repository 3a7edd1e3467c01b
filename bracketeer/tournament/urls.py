from django.urls import include, path

from bracketeer.tournament import views

app_name = 'tournament'

tournament_patterns = [
    path('start', views.start_tournament, name='start'),
    path('bracket', views.bracket, name='bracket'),
    path('bracket/reset', views.reset_bracket, name='reset_bracket'),
    path('matches/<int:match_id>/result', views.report_result, name='report_result'),
    path('standings', views.standings, name='standings'),
    path('groups/standings', views.group_standings, name='group_standings'),
    path('swiss/next-round', views.next_swiss_round, name='next_swiss_round'),
    path('leaderboard/results', views.leaderboard_result, name='leaderboard_result'),
    path('finish', views.finish_tournament, name='finish'),
]

urlpatterns = [
    path('tournaments/<int:tournament_id>/', include(tournament_patterns)),
]
