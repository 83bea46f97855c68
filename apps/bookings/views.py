"""API views for the booking domain."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.messaging.serializers import MessageThreadSerializer
from shared.application.message_bus import message_bus

from .application.command_handlers import (
    CancelBookingCommand,
    ChangeBookingStatusCommand,
    CreateBookingCommand,
    UpdateBookingCommand,
)
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    BookingCreateSerializer,
    BookingReasonSerializer,
    BookingSerializer,
    BookingUpdateSerializer,
)


class BookingViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Stays of the current user, as guest or as host.

    Writes go through the message bus; bookings the caller takes no part
    in answer 404.
    """

    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet
    lookup_value_regex = r"\d+"
    http_method_names = ["get", "post", "patch", "head", "options"]

    def get_queryset(self):  # type: ignore
        return (
            Booking.objects.select_related("property", "guest")
            .involving(self.request.user)
            .order_by("-created_at", "-id")
        )

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "partial_update":
            return BookingUpdateSerializer
        if self.action in {"cancel", "decline"}:
            return BookingReasonSerializer
        return BookingSerializer

    def _booking_response(self, booking: Booking, status_code: int = status.HTTP_200_OK) -> Response:
        booking = self.get_queryset().get(pk=booking.pk)
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data, status=status_code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = message_bus.handle_command(
            CreateBookingCommand(actor_id=request.user.pk, **serializer.validated_data)
        )
        context = self.get_serializer_context()
        thread = result.message_thread
        data = {
            "booking": BookingSerializer(result.booking, context=context).data,
            "message_thread": MessageThreadSerializer(thread, context=context).data if thread else None,
        }
        return Response(data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def search(self, request):  # type: ignore
        """Filter the caller's bookings; newest first."""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = BookingSerializer(page, many=True, context=self.get_serializer_context())
            return self.get_paginated_response(serializer.data)
        serializer = BookingSerializer(queryset, many=True, context=self.get_serializer_context())
        return Response(serializer.data)

    def partial_update(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        changes = dict(serializer.validated_data)
        new_status = changes.pop("status", None)
        reason = changes.pop("reason", None)

        booking = None
        # A refused transition also undoes the field changes.
        with transaction.atomic():
            if changes:
                booking = message_bus.handle_command(
                    UpdateBookingCommand(actor_id=request.user.pk, booking_id=int(pk), changes=changes)
                )
            if new_status:
                booking = self._transition(request, int(pk), new_status, reason)
        if booking is None:
            booking = self.get_object()
        return self._booking_response(booking)

    def _transition(self, request, booking_id: int, new_status: str, reason=None) -> Booking:
        if new_status == Booking.Status.CANCELLED:
            command = CancelBookingCommand(actor_id=request.user.pk, booking_id=booking_id, reason=reason)
        else:
            command = ChangeBookingStatusCommand(
                actor_id=request.user.pk, booking_id=booking_id, status=new_status, reason=reason
            )
        return message_bus.handle_command(command)

    def _reason(self, request):
        serializer = BookingReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data.get("reason")

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        """Cancel as guest or host; confirmed stays release their dates."""
        booking = self._transition(request, int(pk), Booking.Status.CANCELLED, self._reason(request))
        return self._booking_response(booking)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        booking = self._transition(request, int(pk), Booking.Status.CONFIRMED)
        return self._booking_response(booking)

    @action(detail=True, methods=["post"])
    def decline(self, request, pk=None):  # type: ignore
        booking = self._transition(request, int(pk), Booking.Status.DECLINED, self._reason(request))
        return self._booking_response(booking)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        booking = self._transition(request, int(pk), Booking.Status.COMPLETED)
        return self._booking_response(booking)
