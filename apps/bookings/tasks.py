"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.message_bus import message_bus
from shared.domain.exceptions import DomainError

from .models import Booking

logger = logging.getLogger(__name__)


def _stay(booking: Booking) -> str:
    return (
        f"{booking.property.title}, "
        f"{booking.check_in_date:%Y-%m-%d} to {booking.check_out_date:%Y-%m-%d} "
        f"({booking.nights} night(s), {booking.total_amount} {settings.TRIPOSTAY_CURRENCY})"
    )


def _requested(booking: Booking):
    return (
        booking.property.host,
        f"New booking request #{booking.pk}",
        f"{booking.guest.get_full_name()} asked to stay at {_stay(booking)}. "
        "Approve or decline the request from your dashboard.",
    )


def _confirmed(booking: Booking):
    return (
        booking.guest,
        f"Booking #{booking.pk} confirmed",
        f"Your stay at {_stay(booking)} is confirmed.",
    )


def _declined(booking: Booking):
    reason = booking.cancellation_reason or "No reason given"
    return (
        booking.guest,
        f"Booking #{booking.pk} declined",
        f"The host declined your request for {_stay(booking)}. Reason: {reason}",
    )


def _cancelled_for_host(booking: Booking):
    return (
        booking.property.host,
        f"Booking #{booking.pk} cancelled",
        f"The stay at {_stay(booking)} was cancelled. Reason: {booking.cancellation_reason}",
    )


def _cancelled_for_guest(booking: Booking):
    return (
        booking.guest,
        f"Booking #{booking.pk} cancelled",
        f"Your stay at {_stay(booking)} was cancelled. Reason: {booking.cancellation_reason}",
    )


def _completed(booking: Booking):
    return (
        booking.guest,
        f"How was your stay at {booking.property.title}?",
        f"Thanks for staying at {_stay(booking)}. You can now leave a review.",
    )


NOTIFICATIONS = {
    "requested": _requested,
    "confirmed": _confirmed,
    "declined": _declined,
    "cancelled_for_host": _cancelled_for_host,
    "cancelled_for_guest": _cancelled_for_guest,
    "completed": _completed,
}


@shared_task(name="bookings.send_booking_notification")
def send_booking_notification(booking_id: int, kind: str) -> bool:
    """Email one participant of a booking about a lifecycle change."""
    from apps.notifications.services import send_email_notification

    booking = (
        Booking.objects.select_related("guest", "property", "property__host")
        .filter(pk=booking_id)
        .first()
    )
    if booking is None:
        logger.error(f"Booking {booking_id} not found for {kind} notification")
        return False

    recipient, subject, message = NOTIFICATIONS[kind](booking)
    if not recipient.email:
        logger.warning(f"User {recipient.pk} has no email, {kind} notification skipped")
        return False
    return send_email_notification(recipient.email, subject, message)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Complete confirmed bookings whose check-out day has come.

    Runs hourly through Celery Beat.

    Returns:
        dict: {"completed": number of bookings completed}
    """
    from .application.command_handlers import ChangeBookingStatusCommand

    today = timezone.localdate()
    booking_ids = list(
        Booking.objects.filter(
            status=Booking.Status.CONFIRMED,
            check_out_date__lte=today,
        ).values_list("pk", flat=True)
    )

    completed = 0
    for booking_id in booking_ids:
        try:
            message_bus.handle_command(
                ChangeBookingStatusCommand(
                    actor_id=None,
                    booking_id=booking_id,
                    status=Booking.Status.COMPLETED,
                )
            )
        except DomainError as exc:
            logger.warning(f"Booking {booking_id} not completed: {exc.message}")
            continue
        completed += 1

    if completed:
        logger.info(f"[AUTO-COMPLETE] Completed {completed} finished booking(s)")
    return {"completed": completed}
