"""Database models for the form queue."""
from __future__ import annotations

import uuid

from django.db import models


class FormQuerySet(models.QuerySet):
    def queue(self) -> "FormQuerySet":
        """Pending, non-test forms in the order the operator works them."""

        return self.filter(status=Form.PENDING, is_test=False).order_by(
            "-priority", "created_at", "id"
        )

    def for_card_number(self, card_number: int) -> "FormQuerySet":
        return self.filter(external_card_number=card_number)


class Form(models.Model):
    """A ticket-derived request for human input."""

    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"

    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (COMPLETED, "Completed"),
        (SKIPPED, "Skipped"),
    ]

    COMMENT = "comment"
    CLOSE = "close"
    MOVE = "move"

    ON_SUBMIT_CHOICES = [
        (COMMENT, "Comment"),
        (CLOSE, "Close card"),
        (MOVE, "Move card"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    external_card_id = models.CharField(max_length=255)
    external_card_number = models.PositiveIntegerField(db_index=True)
    external_board_id = models.CharField(max_length=255, blank=True)
    title = models.CharField(max_length=255)
    summary = models.TextField(blank=True)
    references = models.JSONField(default=list, blank=True)
    schema = models.JSONField(default=dict)
    ui_schema = models.JSONField(default=dict, blank=True)
    on_submit_action = models.CharField(
        max_length=16, choices=ON_SUBMIT_CHOICES, default=COMMENT
    )
    target_column = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=PENDING)
    response = models.JSONField(null=True, blank=True)
    priority = models.IntegerField(default=0)
    is_test = models.BooleanField(default=False)
    context = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    objects = FormQuerySet.as_manager()

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["status"], name="forms_form_status_idx"),
            models.Index(
                fields=["status", "is_test", "-priority", "created_at"],
                name="forms_form_queue_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.status})"
