"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore
from rest_framework.validators import UniqueValidator  # type: ignore

from .models import PHONE_VALIDATOR

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """The caller's own profile."""

    email = serializers.EmailField(
        validators=[UniqueValidator(queryset=User.objects.all(), lookup="iexact")]
    )
    phone_number = serializers.CharField(
        required=False, allow_blank=True, validators=[PHONE_VALIDATOR]
    )

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "full_name",
            "phone_number",
            "bio",
            "profile_image_url",
            "language_preference",
            "is_host",
            "is_verified",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "is_verified", "created_at", "updated_at"]


class PublicUserSerializer(serializers.ModelSerializer):
    """What other marketplace users may see about someone."""

    user_id = serializers.IntegerField(source="id", read_only=True)

    class Meta:
        model = User
        fields = [
            "user_id",
            "username",
            "full_name",
            "bio",
            "profile_image_url",
            "is_host",
            "is_verified",
            "created_at",
        ]
        read_only_fields = fields
