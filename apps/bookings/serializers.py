"""Serializers for the booking domain."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingSerializer(serializers.ModelSerializer):
    """Read representation shared by every booking endpoint."""

    property_id = serializers.ReadOnlyField()
    property_title = serializers.ReadOnlyField(source="property.title")
    guest_id = serializers.ReadOnlyField()
    host_id = serializers.ReadOnlyField(source="property.host_id")
    nights = serializers.ReadOnlyField()
    currency = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "property_id",
            "property_title",
            "guest_id",
            "host_id",
            "check_in_date",
            "check_out_date",
            "nights",
            "guests_count",
            "total_amount",
            "currency",
            "status",
            "cancellation_reason",
            "confirmed_at",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_currency(self, obj: Booking) -> str:
        return settings.TRIPOSTAY_CURRENCY


class _StayDatesMixin:
    def validate(self, attrs):  # type: ignore
        check_in = attrs.get("check_in_date")
        check_out = attrs.get("check_out_date")
        if check_in and check_out and check_out <= check_in:
            raise serializers.ValidationError(
                {"check_out_date": "Check-out date must be after check-in date."}
            )
        return attrs


class BookingCreateSerializer(_StayDatesMixin, serializers.Serializer):
    """A guest's stay request."""

    property_id = serializers.IntegerField(min_value=1)
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()
    guests_count = serializers.IntegerField(min_value=1, default=1)
    total_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )


class BookingUpdateSerializer(_StayDatesMixin, serializers.Serializer):
    """``PATCH`` body. ``status`` is routed to the lifecycle operations."""

    STATUS_CHOICES = [
        Booking.Status.CONFIRMED,
        Booking.Status.DECLINED,
        Booking.Status.COMPLETED,
        Booking.Status.CANCELLED,
    ]

    check_in_date = serializers.DateField(required=False)
    check_out_date = serializers.DateField(required=False)
    guests_count = serializers.IntegerField(min_value=1, required=False)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class BookingReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=1000)
