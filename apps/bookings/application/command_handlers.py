"""
Booking Command Handlers

The use cases of the booking domain. Each handler runs one command in a
``DjangoUnitOfWork`` so the booking row, the availability ledger and the
message thread change together, and domain events go out only after
the commit.

Commands:
- CreateBookingCommand: request a stay (confirmed at once for instant-book)
- CancelBookingCommand: cancel a pending or confirmed stay
- ChangeBookingStatusCommand: host approval, decline or completion
- UpdateBookingCommand: change guests, amount or (while pending) dates

Every command carries ``actor_id``, the id of the user acting;
``None`` means the system itself (scheduled jobs).
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional
import logging

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import BusinessRuleError, ConflictError
from shared.domain.value_objects import DateRange, Money
from apps.bookings import services as ledger
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingDeclined,
    BookingRequested,
)
from apps.bookings.domain.lifecycle import ensure_transition
from apps.bookings.exceptions import (
    BookingNotFound,
    DatesUnavailable,
    InvalidStatusTransition,
    NotBookingHost,
    PropertyNotFound,
)
from apps.bookings.models import Booking

logger = logging.getLogger(__name__)

DEFAULT_CANCELLATION_REASON = "No reason provided"


# ===== Commands =====

@dataclass(frozen=True)
class CreateBookingCommand:
    actor_id: int
    property_id: int
    check_in_date: date
    check_out_date: date
    guests_count: int = 1
    total_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class CancelBookingCommand:
    actor_id: Optional[int]
    booking_id: int
    reason: Optional[str] = None


@dataclass(frozen=True)
class ChangeBookingStatusCommand:
    """Host-driven transition: ``confirmed``, ``declined`` or ``completed``."""
    actor_id: Optional[int]
    booking_id: int
    status: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class UpdateBookingCommand:
    actor_id: int
    booking_id: int
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BookingResult:
    booking: Booking
    message_thread: Any = None


# ===== Helpers =====

def stay_range(check_in: date, check_out: date) -> DateRange:
    try:
        return DateRange(check_in, check_out)
    except ValueError:
        raise BusinessRuleError(
            "Check-out date must be after check-in date.", error_code="INVALID_DATES"
        ) from None


def quote_total(daily_price: Decimal, stay: DateRange) -> Money:
    return Money(daily_price, settings.TRIPOSTAY_CURRENCY) * len(stay)


def load_booking(booking_id: int, actor_id: Optional[int], *, lock: bool = False) -> Booking:
    """
    Fetch a booking the actor takes part in.

    Strangers get ``BookingNotFound`` so booking ids do not leak.
    """
    if lock:
        # Locked without joins so only the booking row is held.
        queryset = ledger.lock_queryset_if_possible(Booking.objects.all())
    else:
        queryset = Booking.objects.select_related("property", "guest")
    booking = queryset.filter(pk=booking_id).first()
    if booking is None or (actor_id is not None and not booking.involves(actor_id)):
        raise BookingNotFound(f"Booking {booking_id} not found.")
    return booking


def _event_payload(booking: Booking) -> dict:
    return {
        "booking_id": booking.pk,
        "property_id": booking.property_id,
        "guest_id": booking.guest_id,
        "host_id": booking.property.host_id,
        "check_in_date": booking.check_in_date,
        "check_out_date": booking.check_out_date,
    }


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    1. Load the active property
    2. Check the ledger for the stay with the existing rows locked
    3. Persist the booking, ``confirmed`` for instant-book else ``pending``
    4. Open (or reuse) the guest/host thread for requests needing approval
    5. Claim the stay on the ledger when confirmed, re-checked under lock
    """

    def __call__(self, command: CreateBookingCommand) -> BookingResult:
        return self.handle(command)

    def handle(self, command: CreateBookingCommand) -> BookingResult:
        logger.info(
            f"Creating booking for property {command.property_id}, "
            f"guest {command.actor_id}, dates {command.check_in_date} - {command.check_out_date}"
        )
        stay = stay_range(command.check_in_date, command.check_out_date)

        from apps.properties.models import Property
        from apps.messaging.services import get_or_create_thread

        with DjangoUnitOfWork() as uow:
            property_obj = Property.objects.filter(pk=command.property_id, is_active=True).first()
            if property_obj is None:
                raise PropertyNotFound(f"Property {command.property_id} not found or not available for booking.")
            if property_obj.host_id == command.actor_id:
                raise BusinessRuleError("Hosts cannot book their own property.", error_code="OWN_PROPERTY")

            if not ledger.is_range_available(property_obj.pk, stay.start_date, stay.end_date, lock=True):
                raise DatesUnavailable(f"Property {property_obj.pk} is not available for {stay}.")

            if command.total_amount is None:
                total_amount = quote_total(property_obj.daily_price, stay).amount
            else:
                total_amount = command.total_amount

            instant = property_obj.is_instant_book
            booking = Booking.objects.create(
                property=property_obj,
                guest_id=command.actor_id,
                check_in_date=stay.start_date,
                check_out_date=stay.end_date,
                guests_count=command.guests_count,
                total_amount=total_amount,
                status=Booking.Status.CONFIRMED if instant else Booking.Status.PENDING,
                confirmed_at=timezone.now() if instant else None,
            )

            thread = None
            if instant:
                ledger.claim_range(property_obj.pk, stay.start_date, stay.end_date, booking_id=booking.pk)
                booking.record_event(BookingConfirmed(**_event_payload(booking)))
            else:
                thread, _ = get_or_create_thread(
                    guest_id=command.actor_id,
                    host_id=property_obj.host_id,
                    property_id=property_obj.pk,
                )
                booking.record_event(BookingRequested(**_event_payload(booking)))

            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} created with status {booking.status}")
        return BookingResult(booking=booking, message_thread=thread)


class CancelBookingHandler:
    """Cancel a stay; confirmed stays give their nights back to the ledger."""

    def __call__(self, command: CancelBookingCommand) -> Booking:
        return self.handle(command)

    def handle(self, command: CancelBookingCommand) -> Booking:
        logger.info(f"Cancelling booking {command.booking_id}, reason: {command.reason}")

        with DjangoUnitOfWork() as uow:
            booking = load_booking(command.booking_id, command.actor_id, lock=True)
            previous_status = booking.status
            ensure_transition(previous_status, Booking.Status.CANCELLED)

            booking.status = Booking.Status.CANCELLED
            booking.cancellation_reason = command.reason or DEFAULT_CANCELLATION_REASON
            booking.cancelled_at = timezone.now()
            booking.save(update_fields=["status", "cancellation_reason", "cancelled_at", "updated_at"])

            if previous_status == Booking.Status.CONFIRMED:
                ledger.release_stay(booking)

            booking.record_event(BookingCancelled(
                **_event_payload(booking),
                reason=booking.cancellation_reason,
                previous_status=previous_status,
                cancelled_by=command.actor_id,
            ))
            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} cancelled (was {previous_status})")
        return booking


class ChangeBookingStatusHandler:
    """Approve, decline or complete a booking on behalf of its host."""

    def __call__(self, command: ChangeBookingStatusCommand) -> Booking:
        return self.handle(command)

    def handle(self, command: ChangeBookingStatusCommand) -> Booking:
        logger.info(f"Moving booking {command.booking_id} to {command.status}")

        with DjangoUnitOfWork() as uow:
            booking = load_booking(command.booking_id, command.actor_id, lock=True)
            if command.actor_id is not None and booking.property.host_id != command.actor_id:
                raise NotBookingHost()
            if command.status == Booking.Status.CANCELLED:
                raise InvalidStatusTransition("Use the cancel operation to cancel a booking.")

            ensure_transition(booking.status, command.status)
            update_fields = ["status", "updated_at"]

            if command.status == Booking.Status.CONFIRMED:
                stay = booking.date_range
                if not ledger.is_range_available(booking.property_id, stay.start_date, stay.end_date, lock=True):
                    raise DatesUnavailable(
                        "The dates were booked by another guest while this request was pending."
                    )
                ledger.claim_range(booking.property_id, stay.start_date, stay.end_date, booking_id=booking.pk)
                booking.confirmed_at = timezone.now()
                update_fields.append("confirmed_at")
                event = BookingConfirmed(**_event_payload(booking))
            elif command.status == Booking.Status.DECLINED:
                booking.cancellation_reason = command.reason or ""
                update_fields.append("cancellation_reason")
                event = BookingDeclined(**_event_payload(booking), reason=booking.cancellation_reason)
            else:
                event = BookingCompleted(**_event_payload(booking))

            booking.status = command.status
            booking.save(update_fields=update_fields)
            booking.record_event(event)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} is now {booking.status}")
        return booking


class UpdateBookingHandler:
    """
    Change the details of an open booking.

    Dates can move only while the booking is pending: a confirmed stay
    already owns its nights on the ledger.
    """

    editable_fields = ("guests_count", "total_amount", "check_in_date", "check_out_date")

    def __call__(self, command: UpdateBookingCommand) -> Booking:
        return self.handle(command)

    def handle(self, command: UpdateBookingCommand) -> Booking:
        changes = {k: v for k, v in command.changes.items() if k in self.editable_fields}
        logger.info(f"Updating booking {command.booking_id}: {sorted(changes)}")

        with DjangoUnitOfWork():
            booking = load_booking(command.booking_id, command.actor_id, lock=True)
            if booking.is_terminal:
                raise InvalidStatusTransition(f"A {booking.status} booking cannot be changed.")

            check_in = changes.get("check_in_date", booking.check_in_date)
            check_out = changes.get("check_out_date", booking.check_out_date)
            if (check_in, check_out) != (booking.check_in_date, booking.check_out_date):
                if booking.status != Booking.Status.PENDING:
                    raise ConflictError(
                        "Dates of a confirmed booking cannot be changed. Cancel it and book again.",
                        error_code="BOOKING_DATES_LOCKED",
                    )
                stay = stay_range(check_in, check_out)
                if not ledger.is_range_available(booking.property_id, stay.start_date, stay.end_date, lock=True):
                    raise DatesUnavailable()

            for name, value in changes.items():
                setattr(booking, name, value)
            if changes:
                booking.save(update_fields=[*changes, "updated_at"])

        return booking


create_booking = CreateBookingHandler()
cancel_booking = CancelBookingHandler()
change_booking_status = ChangeBookingStatusHandler()
update_booking = UpdateBookingHandler()


def register_handlers(bus) -> None:
    bus.register_command_handler(CreateBookingCommand, create_booking)
    bus.register_command_handler(CancelBookingCommand, cancel_booking)
    bus.register_command_handler(ChangeBookingStatusCommand, change_booking_status)
    bus.register_command_handler(UpdateBookingCommand, update_booking)
