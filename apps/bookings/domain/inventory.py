"""
Inventory

In-memory view of the stays that hold a property's dates. The ledger
builds one from the confirmed bookings touching a range when it needs
to know which dates another booking still holds, e.g. before releasing
the dates of a cancelled stay or reopening dates from the host calendar.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Set, Tuple

from shared.domain.value_objects import DateRange


@dataclass(frozen=True)
class Allocation:
    """A booked date range."""
    booking_id: int
    dates: DateRange


@dataclass
class Inventory:
    """
    Allocations of one property

    ``from_allocations`` loads what is stored without re-validating it;
    ``can_allocate`` answers whether a new stay would collide.
    """
    property_id: int
    allocations: List[Allocation] = field(default_factory=list)

    @classmethod
    def from_allocations(
        cls, property_id: int, allocations: Iterable[Tuple[int, DateRange]]
    ) -> 'Inventory':
        return cls(
            property_id=property_id,
            allocations=[Allocation(booking_id, dates) for booking_id, dates in allocations],
        )

    def can_allocate(self, dates: DateRange, *, ignore_booking: Optional[int] = None) -> bool:
        return not any(
            allocation.dates.overlaps_with(dates)
            for allocation in self.allocations
            if allocation.booking_id != ignore_booking
        )

    def deallocate(self, booking_id: int) -> Optional[Allocation]:
        for index, allocation in enumerate(self.allocations):
            if allocation.booking_id == booking_id:
                return self.allocations.pop(index)
        return None

    def held_dates(self, *, exclude_booking: Optional[int] = None) -> Set[date]:
        """Every date covered by an allocation other than ``exclude_booking``."""
        held: Set[date] = set()
        for allocation in self.allocations:
            if allocation.booking_id != exclude_booking:
                held.update(allocation.dates.iter_days())
        return held

    def releasable_dates(self, booking_id: int) -> List[date]:
        """
        Dates of ``booking_id``'s stay that no other allocation covers.

        Returns an empty list when the booking holds nothing.
        """
        own = next((a for a in self.allocations if a.booking_id == booking_id), None)
        if own is None:
            return []
        others = self.held_dates(exclude_booking=booking_id)
        return [day for day in own.dates.iter_days() if day not in others]
