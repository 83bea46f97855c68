"""Tests for property images and the availability calendar."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.bookings.services import block_range
from apps.properties.models import AvailabilityDate, Property, PropertyImage
from apps.users.models import User


class PropertyImagesTests(APITestCase):
    def setUp(self) -> None:
        self.host = User.objects.create_user(
            email="host@example.com", username="host", password="HostPass123", is_host=True
        )
        self.guest = User.objects.create_user(email="guest@example.com", username="guest", password="GuestPass123")
        self.property = Property.objects.create(
            host=self.host, title="Garden house", daily_price=Decimal("220.00"), address="Taif"
        )
        self.url = reverse("property-images", args=[self.property.pk])

    def test_add_images(self) -> None:
        self.client.force_authenticate(self.host)
        response = self.client.post(
            self.url,
            {"image_urls": ["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"], "is_primary": True},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        images = list(self.property.images.all())
        self.assertEqual([image.display_order for image in images], [0, 1])
        self.assertEqual([image.is_primary for image in images], [True, False])

    def test_new_primary_replaces_old_one(self) -> None:
        old = PropertyImage.objects.create(
            property=self.property, image_url="https://cdn.example.com/old.jpg", is_primary=True
        )
        self.client.force_authenticate(self.host)
        self.client.post(
            self.url, {"image_urls": ["https://cdn.example.com/new.jpg"], "is_primary": True}, format="json"
        )

        old.refresh_from_db()
        self.assertFalse(old.is_primary)
        new = self.property.images.get(image_url="https://cdn.example.com/new.jpg")
        self.assertTrue(new.is_primary)
        self.assertEqual(new.display_order, 1)

    def test_reorder_and_delete(self) -> None:
        first = PropertyImage.objects.create(property=self.property, image_url="https://cdn.example.com/a.jpg")
        second = PropertyImage.objects.create(
            property=self.property, image_url="https://cdn.example.com/b.jpg", display_order=1
        )
        self.client.force_authenticate(self.host)

        response = self.client.patch(
            self.url,
            {"image_order_pairs": [{"image_id": first.pk, "display_order": 5}, {"image_id": second.pk, "display_order": 0}]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        listed = self.client.get(self.url)
        self.assertEqual([item["id"] for item in listed.data], [second.pk, first.pk])

        response = self.client.delete(self.url, {"image_ids": [first.pk]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(list(self.property.images.values_list("pk", flat=True)), [second.pk])

    def test_reorder_rejects_foreign_images(self) -> None:
        other = Property.objects.create(host=self.host, title="Other", daily_price=Decimal("10.00"), address="Abha")
        foreign = PropertyImage.objects.create(property=other, image_url="https://cdn.example.com/x.jpg")
        self.client.force_authenticate(self.host)

        response = self.client.patch(
            self.url, {"image_order_pairs": [{"image_id": foreign.pk, "display_order": 1}]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_host_manages_images(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.post(self.url, {"image_urls": ["https://cdn.example.com/1.jpg"]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class PropertyAvailabilityTests(APITestCase):
    def setUp(self) -> None:
        self.host = User.objects.create_user(
            email="host@example.com", username="host", password="HostPass123", is_host=True
        )
        self.guest = User.objects.create_user(email="guest@example.com", username="guest", password="GuestPass123")
        self.property = Property.objects.create(
            host=self.host, title="Mountain cabin", daily_price=Decimal("300.00"), address="Abha"
        )
        self.url = reverse("property-availability", args=[self.property.pk])

    def test_host_sets_availability(self) -> None:
        self.client.force_authenticate(self.host)
        response = self.client.post(
            self.url,
            {
                "dates": [
                    {"date": "2024-07-02", "is_available": True},
                    {"date": "2024-07-01", "is_available": False},
                ]
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(
            response.data,
            [{"date": "2024-07-01", "is_available": False}, {"date": "2024-07-02", "is_available": True}],
        )

        # writing the same date again updates the existing row
        response = self.client.post(
            self.url, {"dates": [{"date": "2024-07-01", "is_available": True}]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(AvailabilityDate.objects.filter(property=self.property).count(), 2)
        self.assertTrue(AvailabilityDate.objects.get(property=self.property, date=date(2024, 7, 1)).is_available)

    def test_rejects_duplicate_dates(self) -> None:
        self.client.force_authenticate(self.host)
        response = self.client.post(
            self.url,
            {"dates": [{"date": "2024-07-01", "is_available": True}, {"date": "2024-07-01", "is_available": False}]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_open_date_held_by_confirmed_booking(self) -> None:
        Booking.objects.create(
            property=self.property,
            guest=self.guest,
            check_in_date=date(2024, 7, 10),
            check_out_date=date(2024, 7, 12),
            status=Booking.Status.CONFIRMED,
        )
        block_range(self.property.pk, date(2024, 7, 10), date(2024, 7, 12))
        self.client.force_authenticate(self.host)

        response = self.client.post(
            self.url, {"dates": [{"date": "2024-07-11", "is_available": True}]}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error_code"], "DATE_HELD_BY_BOOKING")
        self.assertFalse(AvailabilityDate.objects.get(property=self.property, date=date(2024, 7, 11)).is_available)

    def test_guest_cannot_set_availability(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.post(
            self.url, {"dates": [{"date": "2024-07-01", "is_available": False}]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anyone_reads_availability_window(self) -> None:
        block_range(self.property.pk, date(2024, 8, 1), date(2024, 8, 5))

        response = self.client.get(self.url, {"start_date": "2024-08-02", "end_date": "2024-08-03"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data,
            [{"date": "2024-08-02", "is_available": False}, {"date": "2024-08-03", "is_available": False}],
        )

    def test_unknown_property_is_not_found(self) -> None:
        response = self.client.get(reverse("property-availability", args=[9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
