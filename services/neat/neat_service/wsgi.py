"""WSGI config for the Neat form queue service."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "neat_service.settings")

application = get_wsgi_application()
