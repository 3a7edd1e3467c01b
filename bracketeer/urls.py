from django.urls import include, path

urlpatterns = [
    path('', include('bracketeer.tournament.urls')),
]
