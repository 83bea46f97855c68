"""Tests for the availability ledger."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

from django.db import IntegrityError
from django.test import TestCase

from apps.bookings import services as ledger
from apps.bookings.exceptions import DateHeldByBooking, DatesUnavailable
from apps.bookings.models import Booking
from apps.properties.models import AvailabilityDate, Property
from apps.users.models import User

JUNE_1 = date(2024, 6, 1)
JUNE_3 = date(2024, 6, 3)
JUNE_5 = date(2024, 6, 5)


class LedgerTests(TestCase):
    def setUp(self) -> None:
        self.host = User.objects.create_user(email="host@example.com", password="HostPass123", is_host=True)
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.property = Property.objects.create(
            host=self.host,
            title="Old town loft",
            daily_price=Decimal("120.00"),
            address="Al Balad, Jeddah",
        )

    def _confirmed(self, check_in: date, check_out: date) -> Booking:
        return Booking.objects.create(
            property=self.property,
            guest=self.guest,
            check_in_date=check_in,
            check_out_date=check_out,
            status=Booking.Status.CONFIRMED,
        )

    def test_range_without_rows_is_available(self) -> None:
        self.assertTrue(ledger.is_range_available(self.property.pk, JUNE_1, JUNE_5))

    def test_block_range_is_idempotent(self) -> None:
        self.assertEqual(ledger.block_range(self.property.pk, JUNE_1, JUNE_3), 2)
        ledger.block_range(self.property.pk, JUNE_1, JUNE_3)

        rows = AvailabilityDate.objects.filter(property=self.property)
        self.assertEqual(rows.count(), 2)
        self.assertFalse(rows.filter(is_available=True).exists())
        self.assertFalse(ledger.is_range_available(self.property.pk, JUNE_1, JUNE_3))
        # check-out day stays free
        self.assertTrue(ledger.is_range_available(self.property.pk, JUNE_3, JUNE_5))

    def test_release_range_restores_availability(self) -> None:
        ledger.block_range(self.property.pk, JUNE_1, JUNE_3)

        ledger.release_range(self.property.pk, JUNE_1, JUNE_3)

        self.assertTrue(ledger.is_range_available(self.property.pk, JUNE_1, JUNE_3))
        self.assertTrue(ledger.is_range_available(self.property.pk, JUNE_1, JUNE_3, lock=True))

    def test_block_range_flips_existing_open_rows(self) -> None:
        AvailabilityDate.objects.create(property=self.property, date=JUNE_1, is_available=True)

        ledger.block_range(self.property.pk, JUNE_1, JUNE_3)

        self.assertFalse(AvailabilityDate.objects.get(property=self.property, date=JUNE_1).is_available)

    def test_release_stay_keeps_nights_held_by_other_bookings(self) -> None:
        cancelled = self._confirmed(JUNE_1, JUNE_5)
        ledger.block_range(self.property.pk, JUNE_1, JUNE_5)
        # Overlapping confirmed stay, e.g. created before the ledger existed
        self._confirmed(JUNE_3, JUNE_5)
        cancelled.status = Booking.Status.CANCELLED
        cancelled.save()

        released = ledger.release_stay(cancelled)

        self.assertEqual(released, [JUNE_1, date(2024, 6, 2)])
        self.assertTrue(ledger.is_range_available(self.property.pk, JUNE_1, JUNE_3))
        self.assertFalse(ledger.is_range_available(self.property.pk, JUNE_3, JUNE_5))

    def test_unavailable_property_ids(self) -> None:
        other = Property.objects.create(host=self.host, title="Free", daily_price=Decimal("90.00"), address="Taif")
        ledger.block_range(self.property.pk, JUNE_1, JUNE_3)

        ids = set(ledger.unavailable_property_ids(JUNE_1, JUNE_5))

        self.assertEqual(ids, {self.property.pk})
        self.assertNotIn(other.pk, ids)
        self.assertEqual(set(ledger.unavailable_property_ids(JUNE_3, JUNE_5)), set())

    def test_set_dates_upserts_entries(self) -> None:
        ledger.set_dates(self.property, [(JUNE_1, False)])

        rows = ledger.set_dates(self.property, [(JUNE_1, True), (JUNE_3, False)])

        self.assertEqual([(row.date, row.is_available) for row in rows], [(JUNE_1, True), (JUNE_3, False)])

    def test_set_dates_refuses_to_open_booked_night(self) -> None:
        self._confirmed(JUNE_1, JUNE_3)
        ledger.block_range(self.property.pk, JUNE_1, JUNE_3)

        with self.assertRaises(DateHeldByBooking):
            ledger.set_dates(self.property, [(date(2024, 6, 2), True)])

        self.assertFalse(ledger.is_range_available(self.property.pk, JUNE_1, JUNE_3))

    def test_claim_range_refuses_blocked_nights(self) -> None:
        self.assertEqual(ledger.claim_range(self.property.pk, JUNE_1, JUNE_3), 2)

        with self.assertRaises(DatesUnavailable):
            ledger.claim_range(self.property.pk, date(2024, 6, 2), JUNE_5)

        # nothing of the refused claim was written
        self.assertFalse(AvailabilityDate.objects.filter(property=self.property, date__gte=JUNE_3).exists())
        ledger.claim_range(self.property.pk, JUNE_3, JUNE_5)

    def test_claim_range_refuses_nights_of_other_confirmed_stay(self) -> None:
        other = self._confirmed(JUNE_1, JUNE_3)

        with self.assertRaises(DatesUnavailable):
            ledger.claim_range(self.property.pk, JUNE_1, JUNE_5)

        # the stay itself may claim its own nights
        self.assertEqual(ledger.claim_range(self.property.pk, JUNE_1, JUNE_3, booking_id=other.pk), 2)

    def test_claim_range_reuses_open_rows(self) -> None:
        AvailabilityDate.objects.create(property=self.property, date=JUNE_1, is_available=True)

        ledger.claim_range(self.property.pk, JUNE_1, JUNE_3)

        self.assertEqual(
            list(AvailabilityDate.objects.filter(property=self.property).values_list("is_available", flat=True)),
            [False, False],
        )

    def test_concurrent_insert_surfaces_as_dates_unavailable(self) -> None:
        with mock.patch.object(
            AvailabilityDate.objects, "bulk_create", side_effect=IntegrityError("duplicate night")
        ):
            with self.assertRaises(DatesUnavailable):
                ledger.block_range(self.property.pk, JUNE_1, JUNE_3)
            with self.assertRaises(DatesUnavailable):
                ledger.claim_range(self.property.pk, JUNE_1, JUNE_3)

        self.assertFalse(AvailabilityDate.objects.filter(property=self.property).exists())
