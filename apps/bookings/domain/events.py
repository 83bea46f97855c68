"""
Booking Domain Events

Recorded on the booking while a command runs and published by the unit
of work once the transaction has committed.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingEvent(DomainEvent):
    booking_id: int
    property_id: int
    guest_id: int
    host_id: int
    check_in_date: date
    check_out_date: date


@dataclass(kw_only=True)
class BookingRequested(BookingEvent):
    """
    A guest asked to stay at a property that needs host approval.

    Triggers:
    - Notify the host that a request is waiting
    """


@dataclass(kw_only=True)
class BookingConfirmed(BookingEvent):
    """
    The stay is confirmed, either instantly or by the host.

    Triggers:
    - Send the confirmation to the guest
    """


@dataclass(kw_only=True)
class BookingDeclined(BookingEvent):
    reason: str = ''


@dataclass(kw_only=True)
class BookingCancelled(BookingEvent):
    """
    Triggers:
    - Notify the other participant of the stay
    """
    reason: str
    previous_status: str
    cancelled_by: Optional[int] = None


@dataclass(kw_only=True)
class BookingCompleted(BookingEvent):
    """
    The guest has checked out.

    Triggers:
    - Invite the guest to review the property
    """
