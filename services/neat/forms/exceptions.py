"""Error types raised by queue transitions and the API error handler."""
from __future__ import annotations

import logging
from typing import Any, Dict

from rest_framework import status
from rest_framework.exceptions import APIException, ParseError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class InvalidSubmission(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid submission."
    default_code = "invalid_submission"


class InvalidTransition(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Form already processed"
    default_code = "invalid_transition"


class FormNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Form not found"
    default_code = "not_found"


class SubmissionConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Form was already processed by another request"
    default_code = "conflict"


class TicketingUnavailable(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Failed to post response to the ticketing system"
    default_code = "ticketing_unavailable"


class WebhookAuthenticationFailed(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid signature"
    default_code = "invalid_signature"


def _flatten(errors: Any) -> str:
    if isinstance(errors, dict):
        return "; ".join(f"{key}: {_flatten(value)}" for key, value in errors.items())
    if isinstance(errors, list):
        return ", ".join(_flatten(item) for item in errors)
    return str(errors)


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Render every error as ``{"message": ...}`` without leaking internals."""

    if isinstance(exc, ParseError):
        return Response(
            {"message": "Invalid JSON in request body"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", type(view).__name__ if view else "view", exc_info=exc
        )
        return Response(
            {"message": "Internal Server Error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data = response.data
    if isinstance(data, dict) and set(data) == {"detail"}:
        response.data = {"message": str(data["detail"])}
    else:
        response.data = {"message": "Validation failed: " + _flatten(data), "errors": data}
    return response
