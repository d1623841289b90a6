from django.urls import path

from .views import FeedbackView, SearchView, TrackView

urlpatterns = [
    path('search/', SearchView.as_view(), name='search'),
    path('feedback/', FeedbackView.as_view(), name='feedback'),
    path('analytics/track/', TrackView.as_view(), name='analytics-track'),
]
