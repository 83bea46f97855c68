"""Serializers for reviews.

The reviewer is taken from the request; the property is the one of the
reviewed booking. Anonymous reviews never expose who wrote them.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Review


class ReviewCreateSerializer(serializers.Serializer):
    """Serializer for creating a new review."""

    booking_id = serializers.IntegerField(min_value=1)
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(required=False, allow_blank=True, max_length=5000, default='')
    is_anonymous = serializers.BooleanField(required=False, default=False)


class ReviewSerializer(serializers.ModelSerializer):
    """Read serializer for reviews."""

    property_id = serializers.ReadOnlyField()
    booking_id = serializers.ReadOnlyField()
    reviewer_id = serializers.SerializerMethodField()
    reviewer_username = serializers.SerializerMethodField()
    reviewer_image_url = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = [
            'id',
            'property_id',
            'booking_id',
            'reviewer_id',
            'reviewer_username',
            'reviewer_image_url',
            'rating',
            'comment',
            'is_anonymous',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_reviewer_id(self, obj: Review):  # type: ignore
        return None if obj.is_anonymous else obj.reviewer_id

    def get_reviewer_username(self, obj: Review):  # type: ignore
        return 'Anonymous' if obj.is_anonymous else obj.reviewer.username

    def get_reviewer_image_url(self, obj: Review):  # type: ignore
        if obj.is_anonymous:
            return None
        return obj.reviewer.profile_image_url or None


class ReviewSearchSerializer(serializers.Serializer):
    property_id = serializers.IntegerField(min_value=1)


class ReviewFlagSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500, default='')
