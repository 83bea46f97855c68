"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "property",
        "guest",
        "status",
        "check_in_date",
        "check_out_date",
        "guests_count",
        "total_amount",
        "created_at",
    )
    list_filter = ("status", "check_in_date", "check_out_date")
    search_fields = ("property__title", "guest__email", "guest__username")
    # Status changes must go through the booking workflow to keep the ledger in sync.
    readonly_fields = (
        "status",
        "confirmed_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    )
