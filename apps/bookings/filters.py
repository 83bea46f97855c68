"""FilterSet for booking search."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    property_id = django_filters.NumberFilter(field_name="property_id")
    guest_id = django_filters.NumberFilter(field_name="guest_id")
    host_id = django_filters.NumberFilter(field_name="property__host_id")
    status = django_filters.ChoiceFilter(choices=Booking.Status.choices)
    # Stays starting on/after start_date and ending on/before end_date.
    start_date = django_filters.DateFilter(field_name="check_in_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="check_out_date", lookup_expr="lte")

    class Meta:
        model = Booking
        fields = ["status"]
