"""Celery application for ticketing follow-up actions."""
from __future__ import annotations

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "neat_service.settings")

app = Celery("neat_service")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
