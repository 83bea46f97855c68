"""Booking models for TripoStay."""

from __future__ import annotations

import builtins
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorderMixin
from shared.domain.value_objects import DateRange

from .domain.lifecycle import BookingStatus, HOLDING_STATUSES, TERMINAL_STATUSES


class BookingQuerySet(models.QuerySet):
    def involving(self, user):
        """Bookings where ``user`` is the guest or the host of the property."""
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return self
        return self.filter(Q(guest=user) | Q(property__host=user))

    def holding_dates(self):
        return self.filter(status__in=HOLDING_STATUSES)

    def overlapping(self, start, end):
        """Stays sharing at least one night with ``[start, end)``."""
        return self.filter(check_in_date__lt=end, check_out_date__gt=start)


class Booking(EventRecorderMixin, models.Model):
    """A guest's stay at a property."""

    class Status(models.TextChoices):
        PENDING = BookingStatus.PENDING.value, _("Pending")
        CONFIRMED = BookingStatus.CONFIRMED.value, _("Confirmed")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")
        COMPLETED = BookingStatus.COMPLETED.value, _("Completed")
        DECLINED = BookingStatus.DECLINED.value, _("Declined")

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    guest = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    check_in_date = models.DateField()
    check_out_date = models.DateField(help_text=_("Day of departure; the night before is the last one booked."))
    guests_count = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    cancellation_reason = models.TextField(blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(check_out_date__gt=models.F("check_in_date")),
                name="booking_check_out_after_check_in",
            ),
            models.CheckConstraint(
                condition=Q(guests_count__gte=1),
                name="booking_guests_count_positive",
            ),
            models.CheckConstraint(
                condition=Q(total_amount__gte=0),
                name="booking_total_amount_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "check_in_date", "check_out_date"]),
            models.Index(fields=["guest", "status"]),
            models.Index(fields=["status"]),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} for property {self.property_id}"

    # ``property`` names the listing field inside this class body.
    @builtins.property
    def date_range(self) -> DateRange:
        return DateRange(self.check_in_date, self.check_out_date)

    @builtins.property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days

    @builtins.property
    def host_id(self) -> int:
        return self.property.host_id

    @builtins.property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def involves(self, user_id) -> bool:
        return user_id in (self.guest_id, self.property.host_id)
