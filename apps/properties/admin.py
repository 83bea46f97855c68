"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import AvailabilityDate, Property, PropertyImage


class PropertyImageInline(admin.TabularInline):
    model = PropertyImage
    extra = 0
    fields = ("image_url", "display_order", "is_primary")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "property_type",
        "daily_price",
        "is_instant_book",
        "is_active",
        "host",
        "created_at",
    )
    list_filter = ("is_active", "is_instant_book", "property_type", "cancellation_policy")
    search_fields = ("title", "address", "host__email", "host__username")
    inlines = (PropertyImageInline,)
    readonly_fields = ("created_at", "updated_at")


@admin.register(AvailabilityDate)
class AvailabilityDateAdmin(admin.ModelAdmin):
    list_display = ("property", "date", "is_available", "updated_at")
    list_filter = ("is_available",)
    search_fields = ("property__title",)
    date_hierarchy = "date"
