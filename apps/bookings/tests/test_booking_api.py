"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

from django.db import IntegrityError
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings import services as ledger
from apps.bookings.models import Booking
from apps.messaging.models import MessageThread
from apps.properties.models import AvailabilityDate, Property
from apps.users.models import User


class BookingAPITestCase(APITestCase):
    def setUp(self) -> None:
        self.host = User.objects.create_user(
            email="host@example.com", username="host", password="HostPass123", is_host=True
        )
        self.guest_a = User.objects.create_user(email="a@example.com", username="guest_a", password="GuestPass123")
        self.guest_b = User.objects.create_user(email="b@example.com", username="guest_b", password="GuestPass123")
        self.stranger = User.objects.create_user(email="s@example.com", username="stranger", password="Pass12345")
        self.prop_1 = Property.objects.create(
            host=self.host,
            title="Corniche apartment",
            description="Sea view",
            property_type=Property.PropertyType.APARTMENT,
            daily_price=Decimal("100.00"),
            address="Corniche Rd, Jeddah",
            is_instant_book=True,
        )
        self.prop_2 = Property.objects.create(
            host=self.host,
            title="Desert villa",
            description="Quiet villa",
            property_type=Property.PropertyType.VILLA,
            daily_price=Decimal("250.00"),
            address="Al Ula",
            is_instant_book=False,
        )
        self.list_url = reverse("booking-list")

    def _book(self, user, property_obj, check_in: str, check_out: str, **extra):
        self.client.force_authenticate(user)
        payload = {
            "property_id": property_obj.pk,
            "check_in_date": check_in,
            "check_out_date": check_out,
            "guests_count": 2,
            **extra,
        }
        return self.client.post(self.list_url, payload, format="json")

    def _blocked_dates(self, property_obj) -> list[date]:
        return list(
            AvailabilityDate.objects.filter(property=property_obj, is_available=False)
            .order_by("date")
            .values_list("date", flat=True)
        )


class CreateBookingTests(BookingAPITestCase):
    def test_instant_book_confirms_and_blocks_nights(self) -> None:
        response = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = response.data["booking"]
        self.assertEqual(booking["status"], Booking.Status.CONFIRMED)
        self.assertEqual(booking["total_amount"], "200.00")
        self.assertEqual(booking["nights"], 2)
        self.assertIsNone(response.data["message_thread"])
        self.assertEqual(self._blocked_dates(self.prop_1), [date(2024, 6, 1), date(2024, 6, 2)])

    def test_overlapping_request_is_rejected(self) -> None:
        self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03")

        response = self._book(self.guest_b, self.prop_1, "2024-06-02", "2024-06-04")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "DATES_UNAVAILABLE")
        self.assertEqual(Booking.objects.filter(property=self.prop_1).count(), 1)

    def test_back_to_back_stays_do_not_collide(self) -> None:
        self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03")

        response = self._book(self.guest_b, self.prop_1, "2024-06-03", "2024-06-05")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(len(self._blocked_dates(self.prop_1)), 4)

    def test_request_needing_approval_stays_pending_with_thread(self) -> None:
        response = self._book(self.guest_a, self.prop_2, "2024-07-10", "2024-07-12")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["booking"]["status"], Booking.Status.PENDING)
        thread = response.data["message_thread"]
        self.assertIsNotNone(thread)
        self.assertEqual(thread["guest_id"], self.guest_a.pk)
        self.assertEqual(thread["host_id"], self.host.pk)
        self.assertEqual(thread["property_id"], self.prop_2.pk)
        self.assertFalse(AvailabilityDate.objects.filter(property=self.prop_2).exists())

    def test_second_request_reuses_thread(self) -> None:
        first = self._book(self.guest_a, self.prop_2, "2024-07-10", "2024-07-12")
        second = self._book(self.guest_a, self.prop_2, "2024-08-01", "2024-08-03")

        self.assertEqual(first.data["message_thread"]["id"], second.data["message_thread"]["id"])
        self.assertEqual(MessageThread.objects.count(), 1)

    def test_explicit_total_amount_is_kept(self) -> None:
        response = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03", total_amount="180.00")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["booking"]["total_amount"], "180.00")

    def test_unknown_or_inactive_property_is_not_found(self) -> None:
        self.client.force_authenticate(self.guest_a)
        response = self.client.post(
            self.list_url,
            {"property_id": 9999, "check_in_date": "2024-06-01", "check_out_date": "2024-06-03"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error_code"], "PROPERTY_NOT_FOUND")

        self.prop_1.is_active = False
        self.prop_1.save()
        response = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_check_out_must_follow_check_in(self) -> None:
        response = self._book(self.guest_a, self.prop_1, "2024-06-03", "2024-06-03")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("check_out_date", response.data)

    def test_host_cannot_book_own_listing(self) -> None:
        response = self._book(self.host, self.prop_1, "2024-06-01", "2024-06-03")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "OWN_PROPERTY")

    def test_manually_blocked_dates_cannot_be_booked(self) -> None:
        AvailabilityDate.objects.create(property=self.prop_1, date=date(2024, 6, 2), is_available=False)

        response = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "DATES_UNAVAILABLE")

    def test_booking_requires_authentication(self) -> None:
        response = self.client.post(self.list_url, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_stay_confirmed_after_availability_check_is_rejected(self) -> None:
        check = ledger.is_range_available

        def check_then_lose_race(property_id, start, end, **kwargs):
            available = check(property_id, start, end, **kwargs)
            # another guest commits an overlapping stay right after the check
            Booking.objects.create(
                property_id=property_id,
                guest=self.guest_b,
                check_in_date=start,
                check_out_date=end,
                status=Booking.Status.CONFIRMED,
            )
            ledger.block_range(property_id, start, end)
            return available

        with mock.patch.object(ledger, "is_range_available", side_effect=check_then_lose_race):
            response = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "DATES_UNAVAILABLE")
        self.assertFalse(Booking.objects.filter(guest=self.guest_a).exists())

    def test_conflicting_ledger_insert_rolls_back_booking(self) -> None:
        with mock.patch.object(
            AvailabilityDate.objects, "bulk_create", side_effect=IntegrityError("duplicate night")
        ):
            response = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "DATES_UNAVAILABLE")
        self.assertFalse(Booking.objects.exists())
        self.assertEqual(self._blocked_dates(self.prop_1), [])

    @override_settings(TRIPOSTAY_CURRENCY="KWD")
    def test_total_is_quoted_in_configured_currency(self) -> None:
        response = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-04")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["booking"]["total_amount"], "300.00")
        self.assertEqual(response.data["booking"]["currency"], "KWD")


class CancelBookingTests(BookingAPITestCase):
    def test_cancel_confirmed_booking_releases_nights(self) -> None:
        booking_id = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03").data["booking"]["id"]

        response = self.client.post(
            reverse("booking-cancel", args=[booking_id]), {"reason": "change of plans"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CANCELLED)
        self.assertEqual(response.data["cancellation_reason"], "change of plans")
        self.assertEqual(self._blocked_dates(self.prop_1), [])

        again = self._book(self.guest_b, self.prop_1, "2024-06-01", "2024-06-03")
        self.assertEqual(again.status_code, status.HTTP_201_CREATED, again.data)

    def test_cancel_keeps_nights_of_adjacent_stay(self) -> None:
        first_id = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03").data["booking"]["id"]
        self._book(self.guest_b, self.prop_1, "2024-06-03", "2024-06-05")

        self.client.force_authenticate(self.guest_a)
        self.client.post(reverse("booking-cancel", args=[first_id]), {}, format="json")

        self.assertEqual(self._blocked_dates(self.prop_1), [date(2024, 6, 3), date(2024, 6, 4)])

    def test_cancelling_twice_conflicts(self) -> None:
        booking_id = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03").data["booking"]["id"]
        url = reverse("booking-cancel", args=[booking_id])
        self.client.post(url, {}, format="json")

        response = self.client.post(url, {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error_code"], "BOOKING_ALREADY_CANCELLED")

    def test_reason_defaults_when_omitted(self) -> None:
        booking_id = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03").data["booking"]["id"]

        response = self.client.post(reverse("booking-cancel", args=[booking_id]), {}, format="json")

        self.assertEqual(response.data["cancellation_reason"], "No reason provided")

    def test_cancelling_pending_request_leaves_ledger_untouched(self) -> None:
        booking_id = self._book(self.guest_a, self.prop_2, "2024-07-10", "2024-07-12").data["booking"]["id"]

        response = self.client.post(reverse("booking-cancel", args=[booking_id]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(AvailabilityDate.objects.filter(property=self.prop_2).exists())

    def test_host_can_cancel_and_stranger_cannot(self) -> None:
        booking_id = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03").data["booking"]["id"]
        url = reverse("booking-cancel", args=[booking_id])

        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.post(url, {}, format="json").status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(self.host)
        self.assertEqual(self.client.post(url, {}, format="json").status_code, status.HTTP_200_OK)

    def test_completed_booking_cannot_be_cancelled(self) -> None:
        booking_id = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03").data["booking"]["id"]
        Booking.objects.filter(pk=booking_id).update(status=Booking.Status.COMPLETED)

        response = self.client.post(reverse("booking-cancel", args=[booking_id]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error_code"], "INVALID_STATUS_TRANSITION")


class HostActionTests(BookingAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.pending_id = self._book(self.guest_a, self.prop_2, "2024-07-10", "2024-07-12").data["booking"]["id"]

    def test_host_approves_request(self) -> None:
        self.client.force_authenticate(self.host)

        response = self.client.post(reverse("booking-approve", args=[self.pending_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CONFIRMED)
        self.assertEqual(self._blocked_dates(self.prop_2), [date(2024, 7, 10), date(2024, 7, 11)])

    def test_guest_cannot_approve_and_stranger_gets_not_found(self) -> None:
        url = reverse("booking-approve", args=[self.pending_id])

        self.client.force_authenticate(self.guest_a)
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error_code"], "NOT_BOOKING_HOST")

        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.post(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_approval_fails_when_dates_were_taken(self) -> None:
        other_id = self._book(self.guest_b, self.prop_2, "2024-07-11", "2024-07-13").data["booking"]["id"]
        self.client.force_authenticate(self.host)
        self.client.post(reverse("booking-approve", args=[other_id]))

        response = self.client.post(reverse("booking-approve", args=[self.pending_id]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "DATES_UNAVAILABLE")
        self.assertEqual(Booking.objects.get(pk=self.pending_id).status, Booking.Status.PENDING)

    def test_approval_rechecks_ledger_under_lock(self) -> None:
        check = ledger.is_range_available

        def check_then_lose_race(property_id, start, end, **kwargs):
            available = check(property_id, start, end, **kwargs)
            ledger.block_range(property_id, start, end)
            return available

        self.client.force_authenticate(self.host)
        with mock.patch.object(ledger, "is_range_available", side_effect=check_then_lose_race):
            response = self.client.post(reverse("booking-approve", args=[self.pending_id]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "DATES_UNAVAILABLE")
        self.assertEqual(Booking.objects.get(pk=self.pending_id).status, Booking.Status.PENDING)

    def test_host_declines_request_with_reason(self) -> None:
        self.client.force_authenticate(self.host)

        response = self.client.post(
            reverse("booking-decline", args=[self.pending_id]), {"reason": "Closed for repairs"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], Booking.Status.DECLINED)
        self.assertEqual(response.data["cancellation_reason"], "Closed for repairs")

    def test_complete_requires_confirmed_booking(self) -> None:
        self.client.force_authenticate(self.host)
        url = reverse("booking-complete", args=[self.pending_id])

        self.assertEqual(self.client.post(url).status_code, status.HTTP_409_CONFLICT)

        self.client.post(reverse("booking-approve", args=[self.pending_id]))
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], Booking.Status.COMPLETED)


class ReadAndUpdateBookingTests(BookingAPITestCase):
    def test_retrieve_is_limited_to_participants(self) -> None:
        booking_id = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03").data["booking"]["id"]
        url = reverse("booking-detail", args=[booking_id])

        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)
        self.client.force_authenticate(self.host)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)
        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_search_returns_only_own_bookings_newest_first(self) -> None:
        self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03")
        self._book(self.guest_a, self.prop_2, "2024-07-10", "2024-07-12")
        self._book(self.guest_b, self.prop_1, "2024-06-10", "2024-06-12")

        self.client.force_authenticate(self.guest_a)
        response = self.client.get(reverse("booking-search"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)
        self.assertEqual(response.data["results"][0]["property_id"], self.prop_2.pk)

        response = self.client.get(reverse("booking-search"), {"status": "pending"})
        self.assertEqual(response.data["count"], 1)

        # Asking for someone else's bookings still returns only the caller's
        response = self.client.get(reverse("booking-search"), {"guest_id": self.guest_b.pk})
        self.assertEqual(response.data["count"], 0)

    def test_host_sees_bookings_of_their_listings(self) -> None:
        self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03")
        self._book(self.guest_b, self.prop_1, "2024-06-10", "2024-06-12")

        self.client.force_authenticate(self.host)
        response = self.client.get(reverse("booking-search"), {"start_date": "2024-06-05"})

        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["guest_id"], self.guest_b.pk)

    def test_patch_updates_guests_and_moves_pending_dates(self) -> None:
        booking_id = self._book(self.guest_a, self.prop_2, "2024-07-10", "2024-07-12").data["booking"]["id"]

        response = self.client.patch(
            reverse("booking-detail", args=[booking_id]),
            {"guests_count": 4, "check_in_date": "2024-07-20", "check_out_date": "2024-07-23"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["guests_count"], 4)
        self.assertEqual(response.data["check_in_date"], "2024-07-20")
        self.assertEqual(response.data["nights"], 3)

    def test_patch_cannot_move_confirmed_dates(self) -> None:
        booking_id = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03").data["booking"]["id"]

        response = self.client.patch(
            reverse("booking-detail", args=[booking_id]),
            {"check_in_date": "2024-06-05", "check_out_date": "2024-06-07"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error_code"], "BOOKING_DATES_LOCKED")

    def test_patch_status_cancelled_runs_cancellation(self) -> None:
        booking_id = self._book(self.guest_a, self.prop_1, "2024-06-01", "2024-06-03").data["booking"]["id"]

        response = self.client.patch(
            reverse("booking-detail", args=[booking_id]),
            {"status": "cancelled", "reason": "change of plans"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CANCELLED)
        self.assertEqual(self._blocked_dates(self.prop_1), [])

    def test_refused_status_change_keeps_other_fields(self) -> None:
        booking_id = self._book(self.guest_a, self.prop_2, "2024-07-10", "2024-07-12").data["booking"]["id"]

        response = self.client.patch(
            reverse("booking-detail", args=[booking_id]),
            {"guests_count": 5, "status": "confirmed"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        booking = Booking.objects.get(pk=booking_id)
        self.assertEqual(booking.guests_count, 2)
        self.assertEqual(booking.status, Booking.Status.PENDING)
