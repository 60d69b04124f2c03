"""Tests for the ticketing webhook endpoint."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional
from unittest import mock

from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient

from forms.models import Form
from forms.tests.helpers import make_form
from ticketing.webhooks import sign

SECRET = "test-webhook-secret"


def _card_closed(card_number: Any = 42) -> Dict[str, Any]:
    return {
        "id": "evt-1",
        "action": "card_closed",
        "eventable": {"id": "card-id-42", "number": card_number, "title": "Budget"},
        "creator": {"id": "user-1", "name": "Jane"},
    }


@override_settings(TICKETING_WEBHOOK_SECRET=SECRET)
class TicketingWebhookTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    def post(self, payload: Any, signature: Optional[str] = None, raw: Optional[bytes] = None):
        body = raw if raw is not None else json.dumps(payload).encode()
        headers = {}
        if signature is None:
            signature = sign(body, SECRET)
        if signature:
            headers["HTTP_X_WEBHOOK_SIGNATURE"] = signature
        return self.client.generic(
            "POST",
            reverse("ticketing-webhook"),
            body,
            content_type="application/json",
            **headers,
        )

    @override_settings(TICKETING_WEBHOOK_SECRET="")
    def test_unconfigured_secret(self) -> None:
        response = self.post(_card_closed())
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data["message"], "Webhook not configured")

    def test_missing_signature(self) -> None:
        form = make_form()
        response = self.post(_card_closed(), signature="")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data["message"], "Missing signature")
        form.refresh_from_db()
        self.assertEqual(form.status, Form.PENDING)

    def test_invalid_signature(self) -> None:
        form = make_form()
        response = self.post(_card_closed(), signature="0" * 64)
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data["message"], "Invalid signature")
        form.refresh_from_db()
        self.assertEqual(form.status, Form.PENDING)

    def test_signature_for_other_body_is_rejected(self) -> None:
        make_form()
        signature = sign(json.dumps(_card_closed(7)).encode(), SECRET)
        response = self.post(_card_closed(42), signature=signature)
        self.assertEqual(response.status_code, 401)

    def test_invalid_json(self) -> None:
        response = self.post(None, raw=b"{not json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "Invalid JSON")

    def test_card_closed_completes_pending_form(self) -> None:
        form = make_form(external_card_number=42)

        response = self.post(_card_closed(42))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.data,
            {
                "success": True,
                "action": "form_closed",
                "form_id": str(form.pk),
                "card_number": 42,
            },
        )

        form.refresh_from_db()
        self.assertEqual(form.status, Form.COMPLETED)
        self.assertEqual(form.response, {"_closed_externally": True})
        self.assertIsNotNone(form.completed_at)

    def test_card_closed_completes_skipped_form(self) -> None:
        form = make_form(status=Form.SKIPPED)
        self.post(_card_closed(42))
        form.refresh_from_db()
        self.assertEqual(form.status, Form.COMPLETED)

    def test_card_closed_keeps_existing_response(self) -> None:
        form = make_form(status=Form.COMPLETED, response={"choice": "a"})
        response = self.post(_card_closed(42))
        self.assertEqual(response.data["action"], "form_closed")
        form.refresh_from_db()
        self.assertEqual(form.response, {"choice": "a"})

    def test_card_closed_without_form(self) -> None:
        form = make_form(external_card_number=1)
        response = self.post(_card_closed(999))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.data, {"success": True, "action": "no_form_found", "card_number": 999}
        )
        form.refresh_from_db()
        self.assertEqual(form.status, Form.PENDING)

    def test_card_closed_has_no_side_effects(self) -> None:
        make_form(on_submit_action=Form.CLOSE)
        with mock.patch("ticketing.client.add_comment") as mock_comment, mock.patch(
            "ticketing.tasks.apply_on_submit_action"
        ) as mock_task:
            self.post(_card_closed(42))
        mock_comment.assert_not_called()
        mock_task.delay.assert_not_called()

    def test_other_events_are_ignored(self) -> None:
        form = make_form()
        payload = _card_closed(42)
        payload["action"] = "comment_created"

        response = self.post(payload)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.data,
            {"success": True, "action": "ignored", "event_action": "comment_created"},
        )
        form.refresh_from_db()
        self.assertEqual(form.status, Form.PENDING)

    def test_event_without_card_number_is_ignored(self) -> None:
        payload = _card_closed(None)
        response = self.post(payload)
        self.assertEqual(response.data["action"], "ignored")
