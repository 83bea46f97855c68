"""Property domain models for TripoStay.

A ``Property`` is a listing owned by a host user. Its calendar is kept as
one ``AvailabilityDate`` row per (property, date); a date without a row
is bookable. Booking code owns every write that blocks or frees dates,
see ``apps.bookings.services``.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Avg, Count, FloatField, Q, Value  # type: ignore
from django.db.models.functions import Coalesce  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.infrastructure.fields import EncryptedTextField


class PropertyQuerySet(models.QuerySet):

    def active(self) -> "PropertyQuerySet":
        return self.filter(is_active=True)

    def visible_to(self, user) -> "PropertyQuerySet":
        """Active listings plus the caller's own inactive ones."""
        if user.is_authenticated and user.is_staff:
            return self
        if user.is_authenticated:
            return self.filter(Q(is_active=True) | Q(host=user))
        return self.active()

    def with_rating(self) -> "PropertyQuerySet":
        """Annotate ``average_rating`` (0 without reviews) and ``review_count``."""
        visible_reviews = Q(reviews__is_flagged=False)
        return self.annotate(
            average_rating=Coalesce(
                Avg("reviews__rating", filter=visible_reviews),
                Value(0.0),
                output_field=FloatField(),
            ),
            review_count=Count("reviews", filter=visible_reviews, distinct=True),
        )


class Property(models.Model):
    """A rentable listing."""

    class PropertyType(models.TextChoices):
        APARTMENT = "apartment", _("Apartment")
        HOUSE = "house", _("House")
        VILLA = "villa", _("Villa")
        CHALET = "chalet", _("Chalet")
        STUDIO = "studio", _("Studio")
        ROOM = "room", _("Private room")
        OTHER = "other", _("Other")

    class CancellationPolicy(models.TextChoices):
        FLEXIBLE = "flexible", _("Flexible")
        MODERATE = "moderate", _("Moderate")
        STRICT = "strict", _("Strict")

    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    property_type = models.CharField(
        max_length=20,
        choices=PropertyType.choices,
        default=PropertyType.APARTMENT,
    )
    daily_price = models.DecimalField(max_digits=10, decimal_places=2)
    address = models.CharField(max_length=255)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    check_in_instructions = EncryptedTextField(
        blank=True,
        help_text=_("Door codes and arrival notes, stored encrypted."),
    )
    amenities = models.TextField(blank=True, help_text=_("Free-form, comma separated."))
    is_instant_book = models.BooleanField(
        default=False,
        help_text=_("Bookings are confirmed immediately instead of awaiting host approval."),
    )
    cancellation_policy = models.CharField(
        max_length=20,
        choices=CancellationPolicy.choices,
        default=CancellationPolicy.MODERATE,
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PropertyQuerySet.as_manager()

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(daily_price__gt=0),
                name="property_daily_price_positive",
            ),
        ]
        indexes = [
            models.Index(fields=["is_active", "-created_at"]),
            models.Index(fields=["host", "is_active"]),
            models.Index(fields=["property_type"]),
        ]

    def __str__(self) -> str:
        return self.title

    def is_hosted_by(self, user) -> bool:
        return bool(user and user.is_authenticated and self.host_id == user.pk)


class PropertyImage(models.Model):
    """Image reference attached to a listing, shown by ``display_order``."""

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="images")
    image_url = models.URLField(max_length=500)
    is_primary = models.BooleanField(default=False)
    display_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Property image")
        verbose_name_plural = _("Property images")
        ordering = ["display_order", "id"]

    def __str__(self) -> str:
        return f"{self.property_id} [{self.display_order}]"


class AvailabilityDate(models.Model):
    """Availability of one property on one calendar date."""

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="availability_dates",
    )
    date = models.DateField()
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Availability date")
        verbose_name_plural = _("Availability dates")
        ordering = ["date"]
        constraints = [
            models.UniqueConstraint(
                fields=["property", "date"],
                name="availability_unique_property_date",
            ),
        ]
        indexes = [
            models.Index(fields=["date", "is_available"]),
        ]

    def __str__(self) -> str:
        state = "available" if self.is_available else "blocked"
        return f"{self.property_id} {self.date} ({state})"
