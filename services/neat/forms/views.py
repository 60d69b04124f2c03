"""API views for forms and the operator queue."""
from __future__ import annotations

from django.utils import timezone
from rest_framework import viewsets
from rest_framework.decorators import action, api_view
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response

from ticketing import client as ticketing_client
from ticketing.client import TicketingError

from . import selectors, services
from .exceptions import FormNotFound, TicketingUnavailable
from .models import Form
from .serializers import FormSerializer, QuickCommentSerializer, SubmitResponseSerializer


def _transition_response(form: Form) -> Response:
    return Response({"success": True, "form": FormSerializer(form).data})


class FormViewSet(viewsets.ModelViewSet):
    queryset = Form.objects.all()
    serializer_class = FormSerializer
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["title", "summary", "context"]
    ordering_fields = ["created_at", "updated_at", "priority"]
    ordering = ["created_at"]

    def get_queryset(self):  # type: ignore[override]
        queryset = super().get_queryset()
        status_value = self.request.query_params.get("status")
        if status_value in {value for value, _ in Form.STATUS_CHOICES}:
            queryset = queryset.filter(status=status_value)
        is_test = self.request.query_params.get("is_test")
        if is_test is not None:
            queryset = queryset.filter(is_test=is_test.lower() in {"1", "true", "yes"})
        return queryset

    def get_object(self):  # type: ignore[override]
        form = services.get_form(self.kwargs[self.lookup_field])
        self.check_object_permissions(self.request, form)
        return form

    def update(self, request: Request, *args, **kwargs):  # type: ignore[override]
        kwargs["partial"] = True
        return super().update(request, *args, **kwargs)

    def destroy(self, request: Request, *args, **kwargs):  # type: ignore[override]
        self.get_object().delete()
        return Response({"success": True})

    @action(detail=True, methods=["post"], url_path="unskip")
    def unskip(self, request: Request, pk: str | None = None) -> Response:
        """Return a skipped form to the queue."""

        return _transition_response(services.unskip(pk))

    @action(detail=True, methods=["get"], url_path="position")
    def position(self, request: Request, pk: str | None = None) -> Response:
        """Locate a form, by id or card number, within the queue."""

        form = selectors.find_form(pk)
        if form is None:
            raise FormNotFound(f"Form not found: {pk}")
        return Response(
            {
                "form": self.get_serializer(form).data,
                "queue_position": selectors.queue_position(form),
                "total_pending": selectors.pending_queue().count(),
            }
        )

    @action(detail=True, methods=["get"], url_path="card")
    def card(self, request: Request, pk: str | None = None) -> Response:
        """Fetch the linked card from the ticketing system."""

        form = self.get_object()
        try:
            card = ticketing_client.get_card(form.external_card_number)
        except TicketingError:
            raise TicketingUnavailable("Failed to fetch the card from the ticketing system")
        return Response({"form_id": str(form.pk), "card": card})

    @action(detail=False, methods=["get"], url_path=r"card/(?P<card_id>[^/]+)")
    def by_card(self, request: Request, card_id: str) -> Response:
        form = Form.objects.filter(external_card_id=card_id).order_by("-created_at").first()
        if form is None:
            raise FormNotFound("No form found for this card")
        return Response(self.get_serializer(form).data)


class QueueViewSet(viewsets.ViewSet):
    """The operator queue: pending, non-test forms by priority then age."""

    def list(self, request: Request) -> Response:
        form = selectors.next_pending()
        if form is None:
            return Response({"form": None, "message": "No pending forms"})
        return Response({"form": FormSerializer(form).data})

    @action(detail=False, methods=["get"], url_path="pending")
    def pending(self, request: Request) -> Response:
        forms = list(selectors.pending_queue())
        return Response(
            {"forms": FormSerializer(forms, many=True).data, "total": len(forms)}
        )

    @action(detail=False, methods=["get"], url_path="metrics")
    def metrics(self, request: Request) -> Response:
        """Provide observability data for the queue."""

        totals = selectors.status_counts()
        return Response(
            {
                "pending": totals[Form.PENDING],
                "skipped": totals[Form.SKIPPED],
                "completed": totals[Form.COMPLETED],
                "oldestPendingSeconds": selectors.oldest_pending_seconds(),
            }
        )

    @action(detail=True, methods=["post"], url_path="submit")
    def submit(self, request: Request, pk: str | None = None) -> Response:
        payload = SubmitResponseSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        form = services.submit_response(pk, payload.validated_data.get("response"))
        return _transition_response(form)

    @action(detail=True, methods=["post"], url_path="comment")
    def comment(self, request: Request, pk: str | None = None) -> Response:
        payload = QuickCommentSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        form = services.quick_comment(pk, payload.validated_data.get("comment"))
        return _transition_response(form)

    @action(detail=True, methods=["post"], url_path="skip")
    def skip(self, request: Request, pk: str | None = None) -> Response:
        return _transition_response(services.skip(pk))


@api_view(["GET"])
def health(request: Request) -> Response:
    """Readiness endpoint for orchestration tooling."""

    return Response({"status": "ok", "timestamp": timezone.now().isoformat()})
