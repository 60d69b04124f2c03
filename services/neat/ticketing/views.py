"""API views for inbound ticketing webhooks."""
from __future__ import annotations

import logging

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.request import Request
from rest_framework.response import Response

from forms.exceptions import WebhookAuthenticationFailed

from .webhooks import (
    SIGNATURE_HEADER,
    InvalidPayload,
    handle_event,
    parse_payload,
    verify_signature,
)

logger = logging.getLogger(__name__)


@api_view(["POST"])
@authentication_classes([])
@permission_classes([])
def ticketing_webhook(request: Request) -> Response:
    """Receive signed events from the ticketing system."""

    secret = settings.TICKETING_WEBHOOK_SECRET
    if not secret:
        logger.error("TICKETING_WEBHOOK_SECRET is not configured")
        return Response(
            {"message": "Webhook not configured"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    body = request.body
    signature = request.headers.get(SIGNATURE_HEADER)
    try:
        verify_signature(body, signature, secret)
    except WebhookAuthenticationFailed as exc:
        logger.warning("Rejected webhook: %s", exc.detail)
        raise

    try:
        payload = parse_payload(body)
    except InvalidPayload as exc:
        logger.error("Rejected webhook with an unparseable body")
        return Response({"message": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(handle_event(payload))
