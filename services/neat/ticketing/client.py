"""HTTP client for the external ticketing system."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class TicketingError(Exception):
    """A ticketing call failed or the system reported an error."""


def _api_base() -> str:
    return f"{settings.TICKETING_API_URL.rstrip('/')}/{settings.TICKETING_ACCOUNT}"


def _request(method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Any:
    url = _api_base() + endpoint
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {settings.TICKETING_TOKEN}",
    }
    try:
        response = requests.request(
            method,
            url,
            json=payload,
            headers=headers,
            timeout=settings.TICKETING_TIMEOUT,
        )
    except requests.RequestException as exc:
        raise TicketingError(f"{method} {endpoint} failed: {exc}") from exc

    try:
        body: Any = response.json()
    except ValueError:
        body = None

    if response.status_code >= 400:
        raise TicketingError(f"{method} {endpoint} returned HTTP {response.status_code}")

    if isinstance(body, dict) and "success" in body:
        if not body["success"]:
            error = body.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise TicketingError(message or f"{method} {endpoint} was rejected")
        return body.get("data")
    return body


def get_card(card_number: int) -> Dict[str, Any]:
    return _request("GET", f"/cards/{card_number}.json")


def add_comment(card_number: int, body: str) -> Dict[str, Any]:
    logger.debug("Posting comment to card #%s", card_number)
    return _request("POST", f"/cards/{card_number}/comments.json", {"body": body})


def move_card(card_number: int, column_id: str) -> Any:
    return _request("PUT", f"/cards/{card_number}/column.json", {"column_id": column_id})


def close_card(card_number: int) -> Any:
    return _request("PUT", f"/cards/{card_number}/close.json")
