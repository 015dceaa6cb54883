from django.urls import path

from .views import MyCertificatesView, MyStatsView

urlpatterns = [
    path("me/stats/", MyStatsView.as_view(), name="my-volunteer-stats"),
    path("me/certificates/", MyCertificatesView.as_view(), name="my-certificates"),
]
