"""FilterSet definitions for property search and listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore

from .models import Property


class PropertyFilterSet(django_filters.FilterSet):
    """Filters shared by the listing and the search endpoint.

    ``min_rating``/``max_rating`` expect a queryset annotated with
    ``Property.objects.with_rating()``.
    """

    query = django_filters.CharFilter(method="filter_query")
    location = django_filters.CharFilter(field_name="address", lookup_expr="icontains")
    property_type = django_filters.ChoiceFilter(choices=Property.PropertyType.choices)
    host_id = django_filters.NumberFilter(field_name="host_id")
    is_instant_book = django_filters.BooleanFilter()

    price_min = django_filters.NumberFilter(field_name="daily_price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="daily_price", lookup_expr="lte")
    min_rating = django_filters.NumberFilter(field_name="average_rating", lookup_expr="gte")
    max_rating = django_filters.NumberFilter(field_name="average_rating", lookup_expr="lte")

    # Both ends are needed; the exclusion happens in filter_queryset.
    check_in = django_filters.DateFilter(method="filter_stay_bound")
    check_out = django_filters.DateFilter(method="filter_stay_bound")

    class Meta:
        model = Property
        fields = ["property_type", "is_instant_book"]

    def filter_query(self, queryset, name, value):  # type: ignore
        return queryset.filter(Q(title__icontains=value) | Q(description__icontains=value))

    def filter_stay_bound(self, queryset, name, value):  # type: ignore
        return queryset

    def filter_queryset(self, queryset):  # type: ignore
        queryset = super().filter_queryset(queryset)
        check_in = self.form.cleaned_data.get("check_in")
        check_out = self.form.cleaned_data.get("check_out")
        if not (check_in and check_out):
            return queryset
        if check_out <= check_in:
            raise ValidationError({"check_out": "check_out must be after check_in."})

        from apps.bookings.services import unavailable_property_ids

        return queryset.exclude(pk__in=unavailable_property_ids(check_in, check_out))
