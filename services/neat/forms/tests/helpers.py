"""Shared fixtures for form queue tests."""
from __future__ import annotations

from datetime import timedelta
from typing import Any
from unittest import mock

from django.utils import timezone
from rest_framework.test import APIClient

from forms.models import Form

DEFAULT_SCHEMA = {
    "type": "object",
    "properties": {"choice": {"type": "string"}},
}


def make_form(**overrides: Any) -> Form:
    values = {
        "external_card_id": "card-id-42",
        "external_card_number": 42,
        "title": "Test Form",
        "schema": DEFAULT_SCHEMA,
    }
    values.update(overrides)
    return Form.objects.create(**values)


def backdate(form: Form, minutes: int) -> Form:
    Form.objects.filter(pk=form.pk).update(
        created_at=timezone.now() - timedelta(minutes=minutes)
    )
    form.refresh_from_db()
    return form


class TicketingMocks:
    """Replace outbound ticketing calls for API tests."""

    def setUp(self) -> None:
        super().setUp()  # type: ignore[misc]
        self.client = APIClient()

        comment_patcher = mock.patch(
            "ticketing.client.add_comment", return_value={"id": "comment-1"}
        )
        self.add_comment = comment_patcher.start()
        self.addCleanup(comment_patcher.stop)  # type: ignore[attr-defined]

        task_patcher = mock.patch("ticketing.tasks.apply_on_submit_action")
        self.follow_up = task_patcher.start()
        self.addCleanup(task_patcher.stop)  # type: ignore[attr-defined]
