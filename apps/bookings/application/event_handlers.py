"""
Booking Event Handlers

Subscribers run after commit and only enqueue Celery tasks, so a slow
mail server never holds a database transaction.
"""

import logging

from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingDeclined,
    BookingRequested,
)

logger = logging.getLogger(__name__)


def _notify(booking_id: int, kind: str) -> None:
    from apps.bookings.tasks import send_booking_notification

    send_booking_notification.delay(booking_id, kind)


def on_booking_requested(event: BookingRequested) -> None:
    _notify(event.booking_id, "requested")


def on_booking_confirmed(event: BookingConfirmed) -> None:
    _notify(event.booking_id, "confirmed")


def on_booking_declined(event: BookingDeclined) -> None:
    _notify(event.booking_id, "declined")


def on_booking_cancelled(event: BookingCancelled) -> None:
    # The participant who cancelled already knows.
    if event.cancelled_by != event.host_id:
        _notify(event.booking_id, "cancelled_for_host")
    if event.cancelled_by != event.guest_id:
        _notify(event.booking_id, "cancelled_for_guest")


def on_booking_completed(event: BookingCompleted) -> None:
    _notify(event.booking_id, "completed")


def register_handlers(bus) -> None:
    bus.register_event_handler(BookingRequested, on_booking_requested)
    bus.register_event_handler(BookingConfirmed, on_booking_confirmed)
    bus.register_event_handler(BookingDeclined, on_booking_declined)
    bus.register_event_handler(BookingCancelled, on_booking_cancelled)
    bus.register_event_handler(BookingCompleted, on_booking_completed)
