"""API tests for the compare list."""

from __future__ import annotations

from decimal import Decimal

from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.comparisons.models import CompareListItem
from apps.properties.models import Property
from apps.users.models import User
from apps.wishlists.models import WishlistItem


@override_settings(COMPARE_LIST_LIMIT=2)
class CompareListAPITests(APITestCase):
    def setUp(self) -> None:
        self.host = User.objects.create_user(
            email="host@example.com", username="host", password="HostPass123", is_host=True
        )
        self.user = User.objects.create_user(email="me@example.com", username="me", password="StrongPass123")
        self.properties = [
            Property.objects.create(
                host=self.host, title=f"Listing {n}", daily_price=Decimal("100.00") + n, address="Khobar"
            )
            for n in range(3)
        ]
        self.url = reverse("compare-list")
        self.client.force_authenticate(self.user)

    def test_limit_is_enforced(self) -> None:
        for property_obj in self.properties[:2]:
            response = self.client.post(self.url, {"property_id": property_obj.pk}, format="json")
            self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

        response = self.client.post(self.url, {"property_id": self.properties[2].pk}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "COMPARE_LIST_FULL")

        # removing one frees a slot
        self.client.delete(f"{self.url}?property_id={self.properties[0].pk}")
        response = self.client.post(self.url, {"property_id": self.properties[2].pk}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_independent_from_wishlist(self) -> None:
        WishlistItem.objects.create(user=self.user, property=self.properties[0])

        response = self.client.post(self.url, {"property_id": self.properties[0].pk}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(CompareListItem.objects.filter(user=self.user).count(), 1)
        self.assertEqual(self.client.get(self.url).data["count"], 1)

    def test_duplicate_is_conflict(self) -> None:
        CompareListItem.objects.create(user=self.user, property=self.properties[1])
        response = self.client.post(self.url, {"property_id": self.properties[1].pk}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
