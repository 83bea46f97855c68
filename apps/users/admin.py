"""Admin registrations for the users domain."""

from __future__ import annotations

from django.contrib import admin  # type: ignore
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "username", "password")}),
        (
            _("Profile"),
            {
                "fields": (
                    "full_name",
                    "phone_number",
                    "bio",
                    "profile_image_url",
                    "language_preference",
                )
            },
        ),
        (_("Marketplace"), {"fields": ("is_host", "is_verified")}),
        (_("Security"), {"fields": ("failed_login_attempts", "locked_until")}),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "created_at", "updated_at")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "email",
                    "username",
                    "password1",
                    "password2",
                    "full_name",
                    "is_host",
                    "is_staff",
                    "is_superuser",
                ),
            },
        ),
    )
    list_display = ("email", "username", "full_name", "is_host", "is_verified", "is_active", "is_locked")
    list_filter = ("is_host", "is_verified", "is_active", "is_staff", "language_preference")
    search_fields = ("email", "username", "full_name", "phone_number")
    ordering = ("email",)
    readonly_fields = ("created_at", "updated_at", "date_joined")
