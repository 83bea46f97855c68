"""
Availability ledger.

One ``AvailabilityDate`` row per (property, date) says whether the night
can be booked; a date without a row is available. Every availability
decision in the project reads and writes the ledger through the
functions below.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, List, Sequence, Tuple

from django.db import IntegrityError, transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.properties.models import AvailabilityDate
from shared.domain.value_objects import DateRange

from .domain.inventory import Allocation, Inventory
from .exceptions import DateHeldByBooking, DatesUnavailable
from .models import Booking

logger = logging.getLogger(__name__)


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _range_rows(property_id: int, start: date, end: date):
    return AvailabilityDate.objects.filter(
        property_id=property_id,
        date__gte=start,
        date__lt=end,
    )


def _stay_inventory(property_id: int, start: date, end: date, *, lock: bool = False) -> Inventory:
    """Confirmed stays of the property sharing a night with ``[start, end)``."""

    bookings = Booking.objects.filter(property_id=property_id).holding_dates().overlapping(start, end)
    if lock:
        bookings = lock_queryset_if_possible(bookings)
    return Inventory.from_allocations(
        property_id,
        ((pk, DateRange(check_in, check_out)) for pk, check_in, check_out in bookings.values_list(
            "pk", "check_in_date", "check_out_date"
        )),
    )


def is_range_available(property_id: int, start: date, end: date, *, lock: bool = False) -> bool:
    """False if any night of ``[start, end)`` is explicitly blocked."""

    rows = _range_rows(property_id, start, end)
    if lock:
        # Lock every existing row of the range so a concurrent block or
        # release of the same nights waits for this transaction.
        rows = lock_queryset_if_possible(rows)
        return all(row.is_available for row in rows)
    return not rows.filter(is_available=False).exists()


def block_range(property_id: int, start: date, end: date) -> int:
    """
    Mark every night of ``[start, end)`` unavailable.

    Idempotent. Returns the number of nights in the range.
    """

    days = list(DateRange(start, end).iter_days())
    with transaction.atomic():
        existing = {
            row.date: row
            for row in lock_queryset_if_possible(_range_rows(property_id, start, end))
        }
        to_flip = [day for day in days if day in existing and existing[day].is_available]
        if to_flip:
            AvailabilityDate.objects.filter(property_id=property_id, date__in=to_flip).update(
                is_available=False, updated_at=timezone.now()
            )
        missing = [day for day in days if day not in existing]
        if missing:
            try:
                with transaction.atomic():
                    AvailabilityDate.objects.bulk_create(
                        [
                            AvailabilityDate(property_id=property_id, date=day, is_available=False)
                            for day in missing
                        ]
                    )
            except IntegrityError as exc:
                raise DatesUnavailable(
                    "The selected dates were taken by another booking. Please choose other dates."
                ) from exc

    logger.info("Blocked %s night(s) of property %s from %s", len(days), property_id, start)
    return len(days)


def claim_range(property_id: int, start: date, end: date, *, booking_id: int | None = None) -> int:
    """
    Block ``[start, end)`` for one booking, failing if any night is taken.

    Unlike ``block_range`` a night that is already blocked, or covered
    by another confirmed booking, raises ``DatesUnavailable``. Rows are
    re-read under lock here, so a stay committed after an earlier
    availability check is still seen.
    """

    stay = DateRange(start, end)
    days = list(stay.iter_days())
    with transaction.atomic():
        existing = {
            row.date: row
            for row in lock_queryset_if_possible(_range_rows(property_id, start, end))
        }
        taken = sorted(day for day, row in existing.items() if not row.is_available)
        inventory = _stay_inventory(property_id, start, end, lock=True)
        if taken or not inventory.can_allocate(stay, ignore_booking=booking_id):
            logger.info("Claim of property %s for %s refused, nights taken: %s", property_id, stay, taken)
            raise DatesUnavailable(
                "The selected dates were taken by another booking. Please choose other dates."
            )

        if existing:
            AvailabilityDate.objects.filter(property_id=property_id, date__in=list(existing)).update(
                is_available=False, updated_at=timezone.now()
            )
        missing = [day for day in days if day not in existing]
        if missing:
            try:
                with transaction.atomic():
                    AvailabilityDate.objects.bulk_create(
                        [
                            AvailabilityDate(property_id=property_id, date=day, is_available=False)
                            for day in missing
                        ]
                    )
            except IntegrityError as exc:
                raise DatesUnavailable(
                    "The selected dates were taken by another booking. Please choose other dates."
                ) from exc

    logger.info("Booking %s claimed %s night(s) of property %s from %s", booking_id, len(days), property_id, start)
    return len(days)


def _release_days(property_id: int, days: Sequence[date]) -> int:
    if not days:
        return 0
    with transaction.atomic():
        existing = set(
            lock_queryset_if_possible(
                AvailabilityDate.objects.filter(property_id=property_id, date__in=days)
            ).values_list("date", flat=True)
        )
        AvailabilityDate.objects.filter(property_id=property_id, date__in=existing).update(
            is_available=True, updated_at=timezone.now()
        )
        AvailabilityDate.objects.bulk_create(
            [
                AvailabilityDate(property_id=property_id, date=day, is_available=True)
                for day in days
                if day not in existing
            ],
            ignore_conflicts=True,
        )
    return len(days)


def release_range(property_id: int, start: date, end: date) -> int:
    """Mark every night of ``[start, end)`` available again."""

    released = _release_days(property_id, list(DateRange(start, end).iter_days()))
    logger.info("Released %s night(s) of property %s from %s", released, property_id, start)
    return released


def release_stay(booking: Booking) -> List[date]:
    """
    Release the nights of a cancelled stay.

    Nights another confirmed booking of the same property still covers
    stay blocked. Returns the released dates.
    """

    stay = booking.date_range
    with transaction.atomic():
        inventory = _stay_inventory(booking.property_id, stay.start_date, stay.end_date, lock=True)
        inventory.deallocate(booking.pk)
        inventory.allocations.append(Allocation(booking.pk, stay))
        releasable = inventory.releasable_dates(booking.pk)
        _release_days(booking.property_id, releasable)

    kept = len(stay) - len(releasable)
    if kept:
        logger.info(
            "Booking %s released %s night(s); %s still held by other bookings",
            booking.pk, len(releasable), kept,
        )
    else:
        logger.info("Booking %s released %s night(s)", booking.pk, len(releasable))
    return releasable


def unavailable_property_ids(start: date, end: date):
    """Ids of properties with at least one blocked night in ``[start, end)``."""

    return (
        AvailabilityDate.objects.filter(date__gte=start, date__lt=end, is_available=False)
        .values_list("property_id", flat=True)
        .distinct()
    )


def set_dates(property_obj, entries: Iterable[Tuple[date, bool]]) -> List[AvailabilityDate]:
    """
    Write explicit availability for individual dates of a listing.

    A date covered by a confirmed booking cannot be reopened.
    """

    entries = sorted(entries)
    if not entries:
        return []
    days = [day for day, _ in entries]

    with transaction.atomic():
        opening = [day for day, is_available in entries if is_available]
        if opening:
            inventory = _stay_inventory(
                property_obj.pk, min(opening), max(opening) + timedelta(days=1), lock=True
            )
            held = sorted(set(opening) & inventory.held_dates())
            if held:
                raise DateHeldByBooking(
                    "Dates held by confirmed bookings cannot be opened: "
                    + ", ".join(day.isoformat() for day in held)
                )

        existing = {
            row.date: row
            for row in lock_queryset_if_possible(
                AvailabilityDate.objects.filter(property=property_obj, date__in=days)
            )
        }
        now = timezone.now()
        to_create, to_update = [], []
        for day, is_available in entries:
            row = existing.get(day)
            if row is None:
                to_create.append(AvailabilityDate(property=property_obj, date=day, is_available=is_available))
            elif row.is_available != is_available:
                row.is_available = is_available
                row.updated_at = now
                to_update.append(row)

        if to_update:
            AvailabilityDate.objects.bulk_update(to_update, ["is_available", "updated_at"])
        if to_create:
            try:
                with transaction.atomic():
                    AvailabilityDate.objects.bulk_create(to_create)
            except IntegrityError as exc:
                raise DateHeldByBooking(
                    "The calendar changed while saving. Please retry.",
                    error_code="CALENDAR_CONFLICT",
                ) from exc

    logger.info(
        "Calendar of property %s updated: %s created, %s changed",
        property_obj.pk, len(to_create), len(to_update),
    )
    return list(
        AvailabilityDate.objects.filter(property=property_obj, date__in=days).order_by("date")
    )
