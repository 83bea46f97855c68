"""Serializers for the properties domain."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import AvailabilityDate, Property, PropertyImage


class PropertyImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = PropertyImage
        fields = ["id", "image_url", "is_primary", "display_order", "created_at"]
        read_only_fields = fields


class PropertySerializer(serializers.ModelSerializer):
    """Read representation; never exposes the check-in instructions."""

    host_id = serializers.ReadOnlyField()
    host_username = serializers.ReadOnlyField(source="host.username")
    currency = serializers.SerializerMethodField()
    average_rating = serializers.SerializerMethodField()
    review_count = serializers.SerializerMethodField()
    images = PropertyImageSerializer(many=True, read_only=True)

    class Meta:
        model = Property
        fields = [
            "id",
            "host_id",
            "host_username",
            "title",
            "description",
            "property_type",
            "daily_price",
            "currency",
            "address",
            "latitude",
            "longitude",
            "amenities",
            "is_instant_book",
            "cancellation_policy",
            "is_active",
            "average_rating",
            "review_count",
            "images",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_currency(self, obj: Property) -> str:
        return settings.TRIPOSTAY_CURRENCY

    def get_average_rating(self, obj: Property) -> float:
        return round(float(getattr(obj, "average_rating", 0.0) or 0.0), 2)

    def get_review_count(self, obj: Property) -> int:
        return int(getattr(obj, "review_count", 0) or 0)


class PropertyShortSerializer(serializers.ModelSerializer):
    """Compact listing card used by wishlists and compare lists."""

    primary_image = serializers.SerializerMethodField()

    class Meta:
        model = Property
        fields = [
            "id",
            "title",
            "property_type",
            "daily_price",
            "address",
            "is_instant_book",
            "is_active",
            "primary_image",
        ]
        read_only_fields = fields

    def get_primary_image(self, obj: Property) -> str | None:
        images = list(obj.images.all())
        primary = next((image for image in images if image.is_primary), None)
        chosen = primary or (images[0] if images else None)
        return chosen.image_url if chosen else None


class PropertyWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = [
            "title",
            "description",
            "property_type",
            "daily_price",
            "address",
            "latitude",
            "longitude",
            "check_in_instructions",
            "amenities",
            "is_instant_book",
            "cancellation_policy",
            "is_active",
        ]
        extra_kwargs = {"check_in_instructions": {"write_only": True}}

    def validate_daily_price(self, value):  # type: ignore
        if value <= 0:
            raise serializers.ValidationError("Daily price must be greater than zero.")
        return value


class PropertyAccessInfoSerializer(serializers.ModelSerializer):
    property_id = serializers.ReadOnlyField(source="id")

    class Meta:
        model = Property
        fields = ["property_id", "address", "check_in_instructions"]
        read_only_fields = fields


class ImageUploadSerializer(serializers.Serializer):
    image_urls = serializers.ListField(
        child=serializers.URLField(max_length=500), min_length=1, max_length=20
    )
    is_primary = serializers.BooleanField(default=False)


class ImageOrderSerializer(serializers.Serializer):
    image_id = serializers.IntegerField()
    display_order = serializers.IntegerField(min_value=0)


class ImageReorderSerializer(serializers.Serializer):
    image_order_pairs = ImageOrderSerializer(many=True, allow_empty=False)


class ImageDeleteSerializer(serializers.Serializer):
    image_ids = serializers.ListField(child=serializers.IntegerField(), min_length=1)


class AvailabilityDateSerializer(serializers.ModelSerializer):
    class Meta:
        model = AvailabilityDate
        fields = ["date", "is_available"]


class AvailabilityQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and end < start:
            raise serializers.ValidationError("end_date cannot be earlier than start_date.")
        return attrs


class AvailabilityUpdateSerializer(serializers.Serializer):
    dates = AvailabilityDateSerializer(many=True, allow_empty=False)

    def validate_dates(self, value):  # type: ignore
        seen = [entry["date"] for entry in value]
        if len(seen) != len(set(seen)):
            raise serializers.ValidationError("Each date may appear only once.")
        return value
