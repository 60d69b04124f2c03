"""Signed webhooks sent by the ticketing system."""
from __future__ import annotations

import hashlib
import hmac
import json
import logging
from typing import Any, Dict, Optional

from forms.exceptions import WebhookAuthenticationFailed
from forms.services import close_by_card_number

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Webhook-Signature"
CARD_CLOSED = "card_closed"


class InvalidPayload(ValueError):
    """The webhook body is not a JSON object."""


def sign(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> None:
    if not signature:
        raise WebhookAuthenticationFailed("Missing signature")
    expected = sign(body, secret)
    if not hmac.compare_digest(signature.encode(), expected.encode()):
        raise WebhookAuthenticationFailed("Invalid signature")


def parse_payload(body: bytes) -> Dict[str, Any]:
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise InvalidPayload("Invalid JSON") from exc
    if not isinstance(payload, dict):
        raise InvalidPayload("Invalid JSON")
    return payload


def _card_number(payload: Dict[str, Any]) -> Optional[int]:
    eventable = payload.get("eventable")
    if not isinstance(eventable, dict):
        return None
    number = eventable.get("number")
    if isinstance(number, bool):
        return None
    try:
        return int(number) if number else None
    except (TypeError, ValueError):
        return None


def handle_event(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Apply a verified event and describe what happened."""

    event_action = payload.get("action")
    card_number = _card_number(payload)
    logger.info("Received %s event for card #%s", event_action, card_number)

    if event_action == CARD_CLOSED and card_number:
        closed = close_by_card_number(card_number)
        if closed:
            creator = payload.get("creator") or {}
            logger.info(
                "Closed form %s for card #%s (by %s)",
                closed[0].pk,
                card_number,
                creator.get("name") if isinstance(creator, dict) else None,
            )
            return {
                "success": True,
                "action": "form_closed",
                "form_id": str(closed[0].pk),
                "card_number": card_number,
            }
        logger.info("No form found for card #%s", card_number)
        return {"success": True, "action": "no_form_found", "card_number": card_number}

    return {"success": True, "action": "ignored", "event_action": event_action}
