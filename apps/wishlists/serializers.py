"""Serializers shared by the wishlist and the compare list."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.properties.serializers import PropertyShortSerializer


class SavedPropertySerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    property_id = serializers.IntegerField(read_only=True)
    property = PropertyShortSerializer(read_only=True)
    added_at = serializers.DateTimeField(read_only=True)


class PropertyRefSerializer(serializers.Serializer):
    property_id = serializers.IntegerField(min_value=1)
