"""Route registration for forms and the operator queue."""
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import FormViewSet, QueueViewSet, health

router = DefaultRouter()
router.register("forms", FormViewSet, basename="form")
router.register("queue", QueueViewSet, basename="queue")

urlpatterns = [
    path("healthz/", health, name="forms-health"),
    path("", include(router.urls)),
]
