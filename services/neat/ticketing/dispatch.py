"""Side effects pushed to the ticketing system when a form is answered.

Two entry points with different failure contracts:

* ``post_response`` is blocking. The ticket is the record of truth for a
  structured response, so a failed post aborts the submission.
* ``post_comment`` is best-effort. A quick comment is completed locally
  whether or not the ticketing system accepts the post.

The configured on-submit action (close or move the card) always runs
best-effort, see ``ticketing.tasks``.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict, Optional

from django.utils import timezone

from forms.exceptions import TicketingUnavailable
from forms.models import Form

from . import client
from .client import TicketingError

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")


def field_label(key: str) -> str:
    """``contactEmail`` -> ``Contact Email``."""

    label = _CAMEL_BOUNDARY.sub(r" \1", key)
    return label[:1].upper() + label[1:]


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _trailer(now: Optional[datetime] = None) -> str:
    stamp = (now or timezone.now()).astimezone(dt_timezone.utc).strftime("%Y-%m-%d %H:%M")
    return f"*Submitted {stamp} via Neat*"


def format_response_comment(response: Dict[str, Any], now: Optional[datetime] = None) -> str:
    lines = ["\U0001F4CB **Response via Neat**", ""]
    for key, value in response.items():
        lines.append(f"**{field_label(key)}:** {_render_value(value)}")
    lines.extend(["", "---", _trailer(now)])
    return "\n".join(lines)


def format_quick_comment(comment: str, now: Optional[datetime] = None) -> str:
    lines = [
        "\U0001F4AC **Quick Response via Neat**",
        "",
        comment,
        "",
        "---",
        _trailer(now),
    ]
    return "\n".join(lines)


def post_response(form: Form, response: Dict[str, Any]) -> None:
    """Post a structured response to the card, raising if the post fails."""

    try:
        client.add_comment(form.external_card_number, format_response_comment(response))
    except TicketingError as exc:
        logger.error(
            "Failed to post response for form %s to card #%s: %s",
            form.pk,
            form.external_card_number,
            exc,
        )
        raise TicketingUnavailable() from exc


def post_comment(form: Form, comment: str) -> bool:
    """Post a quick comment to the card; failures are logged only."""

    try:
        client.add_comment(form.external_card_number, format_quick_comment(comment))
    except TicketingError as exc:
        logger.error(
            "Failed to post comment for form %s to card #%s: %s",
            form.pk,
            form.external_card_number,
            exc,
        )
        return False
    return True


def run_on_submit_action(form: Form) -> Optional[str]:
    """Close or move the card as configured; returns the action performed.

    ``TicketingError`` propagates so the caller can decide whether to retry.
    """

    if form.on_submit_action == Form.CLOSE:
        client.close_card(form.external_card_number)
        return Form.CLOSE
    if form.on_submit_action == Form.MOVE:
        if not form.target_column:
            logger.warning(
                "Form %s is configured to move card #%s but has no target column",
                form.pk,
                form.external_card_number,
            )
            return None
        client.move_card(form.external_card_number, form.target_column)
        return Form.MOVE
    return None
