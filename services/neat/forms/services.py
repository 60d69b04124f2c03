"""Form status transitions.

pending -> completed   submit_response / quick_comment / close_by_card_number
pending -> skipped     skip
skipped -> pending     unskip

``completed`` is terminal. Transitions that can race with each other write
through a conditional update on the expected current status, so two requests
for the same form can never both succeed.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ticketing import dispatch
from ticketing.tasks import schedule_on_submit_action

from .exceptions import (
    FormNotFound,
    InvalidSubmission,
    InvalidTransition,
    SubmissionConflict,
)
from .models import Form
from .schema import ResponseValidationError, SchemaDefinitionError, validate_response

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 10000

ALREADY_PROCESSED = "Form already processed"
NOT_SKIPPED = "Form is not skipped"
CLOSED_EXTERNALLY_RESPONSE = {"_closed_externally": True}


def get_form(form_id: Any) -> Form:
    try:
        return Form.objects.get(pk=form_id)
    except (Form.DoesNotExist, ValidationError, ValueError):
        raise FormNotFound()


def _complete(form: Form, response: Dict[str, Any]) -> Form:
    """Mark ``form`` completed only if it is still pending."""

    now = timezone.now()
    updated = Form.objects.filter(pk=form.pk, status=Form.PENDING).update(
        status=Form.COMPLETED,
        response=response,
        completed_at=now,
        updated_at=now,
    )
    if not updated:
        logger.warning("Form %s was completed by a concurrent request", form.pk)
        raise SubmissionConflict()
    form.refresh_from_db()
    return form


def _move(form: Form, expected: str, target: str, guard_message: str) -> Form:
    updated = Form.objects.filter(pk=form.pk, status=expected).update(
        status=target,
        updated_at=timezone.now(),
    )
    if not updated:
        raise InvalidTransition(guard_message)
    form.refresh_from_db()
    return form


def submit_response(form_id: Any, response: Any) -> Form:
    """Validate a structured response, post it to the card and complete the form."""

    if response is None:
        raise InvalidSubmission("Response data is required")

    form = get_form(form_id)
    if form.status != Form.PENDING:
        raise InvalidTransition(ALREADY_PROCESSED)

    try:
        validate_response(form.schema, response)
    except ResponseValidationError as exc:
        raise InvalidSubmission(str(exc))
    except SchemaDefinitionError as exc:
        logger.error("Form %s has an unusable schema: %s", form.pk, exc)
        raise InvalidSubmission(f"Validation failed: {exc}")

    dispatch.post_response(form, response)
    form = _complete(form, response)
    logger.info("Form %s completed with a structured response", form.pk)

    schedule_on_submit_action(form)
    return form


def quick_comment(form_id: Any, comment: Any) -> Form:
    """Complete a form with a free-text comment, bypassing schema validation."""

    if not comment or not isinstance(comment, str):
        raise InvalidSubmission("Comment is required")
    text = comment.strip()
    if not text:
        raise InvalidSubmission("Comment cannot be empty")
    if len(text) > MAX_COMMENT_LENGTH:
        raise InvalidSubmission(f"Comment is too long (max {MAX_COMMENT_LENGTH} characters)")

    form = get_form(form_id)
    if form.status != Form.PENDING:
        raise InvalidTransition(ALREADY_PROCESSED)

    form = _complete(form, {"_comment": text})
    logger.info("Form %s completed with a quick comment", form.pk)

    dispatch.post_comment(form, text)
    schedule_on_submit_action(form)
    return form


def skip(form_id: Any) -> Form:
    form = get_form(form_id)
    if form.status != Form.PENDING:
        raise InvalidTransition(ALREADY_PROCESSED)
    form = _move(form, Form.PENDING, Form.SKIPPED, ALREADY_PROCESSED)
    logger.info("Form %s skipped", form.pk)
    return form


def unskip(form_id: Any) -> Form:
    form = get_form(form_id)
    if form.status != Form.SKIPPED:
        raise InvalidTransition(NOT_SKIPPED)
    form = _move(form, Form.SKIPPED, Form.PENDING, NOT_SKIPPED)
    logger.info("Form %s returned to the queue", form.pk)
    return form


def close_by_card_number(card_number: int) -> List[Form]:
    """Force every form linked to ``card_number`` to completed.

    The card was closed in the ticketing system, so no validation runs and the
    current status is not checked; no side effects are dispatched.
    """

    closed: List[Form] = []
    now = timezone.now()
    with transaction.atomic():
        for form in Form.objects.select_for_update().for_card_number(card_number).order_by(
            "created_at", "id"
        ):
            form.status = Form.COMPLETED
            if form.response is None:
                form.response = dict(CLOSED_EXTERNALLY_RESPONSE)
            if form.completed_at is None:
                form.completed_at = now
            form.save(update_fields=["status", "response", "completed_at", "updated_at"])
            closed.append(form)
    return closed
