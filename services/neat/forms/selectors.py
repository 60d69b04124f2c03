"""Read-side queries over the form store.

The queue is never held in memory: every call re-reads the database so that
concurrent submissions and webhooks are always reflected.
"""
from __future__ import annotations

from typing import Dict, Optional

from django.core.exceptions import ValidationError
from django.db.models import Count
from django.utils import timezone

from .models import Form, FormQuerySet


def pending_queue() -> FormQuerySet:
    return Form.objects.queue()


def next_pending() -> Optional[Form]:
    """Highest priority pending form, oldest first among equals."""

    return pending_queue().first()


def queue_position(form: Form) -> Optional[int]:
    """1-based position of ``form`` in the queue, ``None`` when not queued."""

    if form.status != Form.PENDING or form.is_test:
        return None
    for index, form_id in enumerate(pending_queue().values_list("id", flat=True), start=1):
        if form_id == form.pk:
            return index
    return None


def find_form(identifier: str) -> Optional[Form]:
    """Look a form up by id, falling back to its external card number."""

    try:
        form = Form.objects.filter(pk=identifier).first()
    except (ValidationError, ValueError):
        form = None
    if form is None and str(identifier).isdigit():
        form = Form.objects.for_card_number(int(identifier)).order_by("-created_at").first()
    return form


def status_counts() -> Dict[str, int]:
    totals: Dict[str, int] = {value: 0 for value, _ in Form.STATUS_CHOICES}
    for entry in Form.objects.values("status").order_by().annotate(total=Count("id")):
        if entry["status"] in totals:
            totals[entry["status"]] = int(entry["total"])
    return totals


def oldest_pending_seconds() -> int:
    oldest = pending_queue().order_by("created_at").first()
    if oldest is None:
        return 0
    return max(int((timezone.now() - oldest.created_at).total_seconds()), 0)
