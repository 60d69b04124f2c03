"""Tests for the form management API."""
from __future__ import annotations

from unittest import mock

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from forms.models import Form
from ticketing.client import TicketingError

from .helpers import DEFAULT_SCHEMA, backdate, make_form


class FormApiTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    def test_create_form(self) -> None:
        response = self.client.post(
            reverse("form-list"),
            {
                "external_card_id": "card-abc",
                "external_card_number": 101,
                "title": "Approve the budget",
                "schema": DEFAULT_SCHEMA,
                "references": [
                    {"label": "Budget sheet", "url": "https://example.com/b", "type": "doc"}
                ],
                "on_submit_action": Form.CLOSE,
                "priority": 4,
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], Form.PENDING)
        self.assertIsNone(response.data["response"])
        self.assertEqual(response.data["references"][0]["label"], "Budget sheet")

        form = Form.objects.get(pk=response.data["id"])
        self.assertEqual(form.priority, 4)
        self.assertEqual(form.on_submit_action, Form.CLOSE)
        self.assertEqual(form.references, [
            {"label": "Budget sheet", "url": "https://example.com/b", "type": "doc"}
        ])

    def test_create_rejects_unsupported_schema(self) -> None:
        response = self.client.post(
            reverse("form-list"),
            {
                "external_card_id": "card-abc",
                "external_card_number": 101,
                "title": "Upload",
                "schema": {"type": "object", "properties": {"files": {"type": "array"}}},
            },
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.data["message"].startswith("Validation failed"))
        self.assertIn("schema", response.data["errors"])
        self.assertFalse(Form.objects.exists())

    def test_create_rejects_unknown_reference_type(self) -> None:
        response = self.client.post(
            reverse("form-list"),
            {
                "external_card_id": "card-abc",
                "external_card_number": 101,
                "title": "Read this",
                "schema": DEFAULT_SCHEMA,
                "references": [{"label": "Slides", "url": "https://example.com", "type": "pdf"}],
            },
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("references", response.data["errors"])

    def test_status_and_response_are_read_only(self) -> None:
        response = self.client.post(
            reverse("form-list"),
            {
                "external_card_id": "card-abc",
                "external_card_number": 5,
                "title": "Sneaky",
                "schema": DEFAULT_SCHEMA,
                "status": Form.COMPLETED,
                "response": {"choice": "a"},
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], Form.PENDING)
        self.assertIsNone(response.data["response"])

    def test_list_filters(self) -> None:
        make_form(title="Pending")
        make_form(title="Skipped", status=Form.SKIPPED)
        make_form(title="Sandbox", is_test=True)

        response = self.client.get(reverse("form-list"), {"status": Form.SKIPPED})
        self.assertEqual([form["title"] for form in response.data], ["Skipped"])

        response = self.client.get(reverse("form-list"), {"is_test": "true"})
        self.assertEqual([form["title"] for form in response.data], ["Sandbox"])

        response = self.client.get(reverse("form-list"))
        self.assertEqual(len(response.data), 3)

    def test_search(self) -> None:
        make_form(title="Approve the budget")
        make_form(title="Pick a venue")
        response = self.client.get(reverse("form-list"), {"search": "venue"})
        self.assertEqual([form["title"] for form in response.data], ["Pick a venue"])

    def test_retrieve(self) -> None:
        form = make_form()
        response = self.client.get(reverse("form-detail", args=[form.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["id"], str(form.pk))
        self.assertEqual(response.data["schema"], DEFAULT_SCHEMA)

    def test_retrieve_unknown_form(self) -> None:
        response = self.client.get(reverse("form-detail", args=["nope"]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"message": "Form not found"})

    def test_update_is_partial(self) -> None:
        form = make_form(title="Old title", priority=1)
        before = form.updated_at

        response = self.client.put(
            reverse("form-detail", args=[form.pk]), {"title": "New title"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        form.refresh_from_db()
        self.assertEqual(form.title, "New title")
        self.assertEqual(form.priority, 1)
        self.assertGreater(form.updated_at, before)

    def test_update_cannot_change_status(self) -> None:
        form = make_form()
        self.client.patch(
            reverse("form-detail", args=[form.pk]), {"status": Form.COMPLETED}, format="json"
        )
        form.refresh_from_db()
        self.assertEqual(form.status, Form.PENDING)

    def test_delete(self) -> None:
        form = make_form()
        response = self.client.delete(reverse("form-detail", args=[form.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {"success": True})

        response = self.client.get(reverse("form-detail", args=[form.pk]))
        self.assertEqual(response.status_code, 404)

    def test_by_card(self) -> None:
        backdate(make_form(external_card_id="card-xyz", title="Older"), minutes=10)
        latest = make_form(external_card_id="card-xyz", title="Latest")
        response = self.client.get(reverse("form-by-card", args=["card-xyz"]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["id"], str(latest.pk))

    def test_by_card_unknown(self) -> None:
        response = self.client.get(reverse("form-by-card", args=["card-missing"]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["message"], "No form found for this card")

    @mock.patch("ticketing.client.get_card")
    def test_card_lookup(self, mock_get_card: mock.Mock) -> None:
        mock_get_card.return_value = {"number": 42, "title": "Budget"}
        form = make_form(external_card_number=42)

        response = self.client.get(reverse("form-card", args=[form.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["form_id"], str(form.pk))
        self.assertEqual(response.data["card"]["title"], "Budget")
        mock_get_card.assert_called_once_with(42)

    @mock.patch("ticketing.client.get_card", side_effect=TicketingError("HTTP 503"))
    def test_card_lookup_failure(self, mock_get_card: mock.Mock) -> None:
        form = make_form()
        response = self.client.get(reverse("form-card", args=[form.pk]))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.data["message"], "Failed to fetch the card from the ticketing system"
        )

    def test_health(self) -> None:
        response = self.client.get(reverse("forms-health"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "ok")
        self.assertIn("timestamp", response.data)


class RequestLoggingTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    def test_logs_successful_requests(self) -> None:
        with self.assertLogs("neat_service.requests", level="INFO") as logs:
            self.client.get(reverse("forms-health"))
        record = logs.records[0]
        self.assertEqual(record.levelname, "INFO")
        self.assertEqual(record.method, "GET")
        self.assertEqual(record.path, "/api/healthz/")
        self.assertEqual(record.status, 200)

    def test_client_errors_log_as_warnings(self) -> None:
        with self.assertLogs("neat_service.requests", level="INFO") as logs:
            self.client.get(reverse("form-detail", args=["nope"]))
        self.assertEqual(logs.records[0].levelname, "WARNING")
        self.assertEqual(logs.records[0].status, 404)
