"""Serializers for authentication flows (register, login)."""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from django.contrib.auth.password_validation import validate_password  # type: ignore
from django.db import transaction  # type: ignore
from rest_framework import serializers  # type: ignore
from rest_framework.exceptions import AuthenticationFailed  # type: ignore

from shared.domain.exceptions import ConflictError
from .models import PHONE_VALIDATOR


User = get_user_model()


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(min_length=8, write_only=True)
    full_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    phone_number = serializers.CharField(
        required=False, allow_blank=True, validators=[PHONE_VALIDATOR]
    )
    language_preference = serializers.ChoiceField(
        choices=User.Language.choices, required=False
    )
    is_host = serializers.BooleanField(required=False, default=False)

    def validate_password(self, value: str) -> str:
        validate_password(value)
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        if User.objects.filter(email__iexact=attrs["email"]).exists():
            raise ConflictError(
                "A user with this email already exists.", error_code="EMAIL_TAKEN"
            )
        if User.objects.filter(username=attrs["username"]).exists():
            raise ConflictError(
                "A user with this username already exists.", error_code="USERNAME_TAKEN"
            )
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        password = validated_data.pop("password")
        return User.objects.create_user(password=password, **validated_data)


class LoginSerializer(serializers.Serializer):
    login = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        login = attrs.get("login", "")
        password = attrs.get("password", "")

        try:
            user = User.objects.get_by_login(login)
        except User.DoesNotExist:
            raise AuthenticationFailed("Invalid login or password.")

        if user.is_locked:
            raise AuthenticationFailed(
                "Account is temporarily locked. Try again later.", code="account_locked"
            )

        if not user.check_password(password) or not user.is_active:
            user.register_failed_attempt()
            raise AuthenticationFailed("Invalid login or password.")

        if user.failed_login_attempts or user.locked_until:
            user.unlock()

        attrs["user"] = user
        return attrs
