"""Background tasks for ticketing follow-up actions."""
from __future__ import annotations

import logging

from celery import shared_task

from forms.models import Form

from .client import TicketingError
from .dispatch import run_on_submit_action

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=5)
def apply_on_submit_action(self, form_id: str) -> None:
    """Close or move the card of a completed form, retrying transient failures."""

    try:
        form = Form.objects.get(pk=form_id)
    except Form.DoesNotExist:
        logger.warning("Form %s does not exist", form_id)
        return

    try:
        performed = run_on_submit_action(form)
    except TicketingError as exc:
        if self.request.retries >= self.max_retries:
            logger.error(
                "Giving up on %s for card #%s of form %s: %s",
                form.on_submit_action,
                form.external_card_number,
                form_id,
                exc,
            )
            return
        logger.warning(
            "Retrying %s for card #%s of form %s: %s",
            form.on_submit_action,
            form.external_card_number,
            form_id,
            exc,
        )
        raise self.retry(exc=exc, countdown=min(60, 2 ** self.request.retries))

    if performed:
        logger.info("Applied %s to card #%s for form %s", performed, form.external_card_number, form_id)


def schedule_on_submit_action(form: Form) -> None:
    """Queue the follow-up action for a completed form; never raises."""

    if form.on_submit_action == Form.COMMENT:
        return
    try:
        apply_on_submit_action.delay(str(form.pk))
    except Exception:  # the form stays completed if queueing fails
        logger.exception(
            "Could not queue %s for card #%s of form %s",
            form.on_submit_action,
            form.external_card_number,
            form.pk,
        )
