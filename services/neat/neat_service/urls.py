"""URL configuration for the Neat form queue service."""
from django.urls import include, path

urlpatterns = [
    path("api/", include("forms.urls")),
    path("api/", include("ticketing.urls")),
]
