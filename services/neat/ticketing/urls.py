"""Route registration for ticketing webhooks."""
from __future__ import annotations

from django.urls import path

from .views import ticketing_webhook

urlpatterns = [
    path("webhooks/ticketing/", ticketing_webhook, name="ticketing-webhook"),
]
