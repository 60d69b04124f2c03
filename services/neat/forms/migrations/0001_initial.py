# Generated manually for initial schema.
from __future__ import annotations

import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Form",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("external_card_id", models.CharField(max_length=255)),
                ("external_card_number", models.PositiveIntegerField(db_index=True)),
                ("external_board_id", models.CharField(blank=True, max_length=255)),
                ("title", models.CharField(max_length=255)),
                ("summary", models.TextField(blank=True)),
                ("references", models.JSONField(blank=True, default=list)),
                ("schema", models.JSONField(default=dict)),
                ("ui_schema", models.JSONField(blank=True, default=dict)),
                (
                    "on_submit_action",
                    models.CharField(
                        choices=[("comment", "Comment"), ("close", "Close card"), ("move", "Move card")],
                        default="comment",
                        max_length=16,
                    ),
                ),
                ("target_column", models.CharField(blank=True, max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed"), ("skipped", "Skipped")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("response", models.JSONField(blank=True, null=True)),
                ("priority", models.IntegerField(default=0)),
                ("is_test", models.BooleanField(default=False)),
                ("context", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["status"], name="forms_form_status_idx"),
                    models.Index(
                        fields=["status", "is_test", "-priority", "created_at"],
                        name="forms_form_queue_idx",
                    ),
                ],
            },
        ),
    ]
