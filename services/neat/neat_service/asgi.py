"""ASGI config for the Neat form queue service."""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "neat_service.settings")

application = get_asgi_application()
