"""
Booking lifecycle

The status graph every booking follows:

    pending   -> confirmed | declined | cancelled
    confirmed -> cancelled | completed

``cancelled``, ``completed`` and ``declined`` are terminal.
"""

from enum import Enum
from typing import Dict, FrozenSet

from apps.bookings.exceptions import AlreadyCancelled, InvalidStatusTransition


class BookingStatus(str, Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'
    DECLINED = 'declined'


ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    BookingStatus.PENDING.value: frozenset({
        BookingStatus.CONFIRMED.value,
        BookingStatus.DECLINED.value,
        BookingStatus.CANCELLED.value,
    }),
    BookingStatus.CONFIRMED.value: frozenset({
        BookingStatus.CANCELLED.value,
        BookingStatus.COMPLETED.value,
    }),
    BookingStatus.CANCELLED.value: frozenset(),
    BookingStatus.COMPLETED.value: frozenset(),
    BookingStatus.DECLINED.value: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Statuses whose stay is written to the availability ledger.
HOLDING_STATUSES = frozenset({BookingStatus.CONFIRMED.value})


def _value(status) -> str:
    return getattr(status, "value", status)


def can_transition(current: str, target: str) -> bool:
    return _value(target) in ALLOWED_TRANSITIONS.get(_value(current), frozenset())


def ensure_transition(current: str, target: str) -> None:
    """
    Raise unless ``current -> target`` is an edge of the lifecycle.

    Cancelling twice gets its own error so clients can tell a repeated
    request from an illegal one.
    """
    current, target = _value(current), _value(target)
    if can_transition(current, target):
        return
    if current == target == BookingStatus.CANCELLED.value:
        raise AlreadyCancelled()
    raise InvalidStatusTransition(
        f"Cannot change booking status from '{current}' to '{target}'."
    )
