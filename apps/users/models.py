"""User domain models for TripoStay.

One account type covers both sides of the marketplace: every user can
book stays, and users flagged ``is_host`` can also list properties.
The model keeps the login lockout bookkeeping next to the credentials.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from django.conf import settings  # type: ignore
from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


PHONE_VALIDATOR = RegexValidator(
    regex=r"^\+?\d{7,15}$",
    message=_("Invalid phone number. Use the international format without spaces."),
)


class CustomUserManager(BaseUserManager):
    """Manager that uses the email address as the login identifier."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("An email address is required to create a user.")
        email = self.normalize_email(email)
        if not extra_fields.get("username"):
            extra_fields["username"] = email.split("@")[0]

        phone = extra_fields.get("phone_number")
        if phone:
            extra_fields["phone_number"] = self.normalize_phone(phone)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    def get_by_login(self, login: str):
        """Look a user up by email (case-insensitive) or exact username."""
        if "@" in login:
            return self.get(email__iexact=login)
        return self.get(username=login)

    @staticmethod
    def normalize_phone(phone: str) -> str:
        return phone.replace(" ", "").replace("-", "")


class CustomUser(AbstractUser):
    """Marketplace account: a guest, and optionally a host."""

    class Language(models.TextChoices):
        ARABIC = "ar", _("Arabic")
        ENGLISH = "en", _("English")

    # full_name replaces Django's first/last name pair
    first_name = None  # type: ignore[assignment]
    last_name = None  # type: ignore[assignment]

    username = models.CharField(
        _("Username"),
        max_length=150,
        unique=True,
        error_messages={"unique": _("A user with that username already exists.")},
    )
    email = models.EmailField(_("Email"), unique=True)
    full_name = models.CharField(_("Full name"), max_length=255, blank=True)
    phone_number = models.CharField(
        _("Phone number"),
        max_length=20,
        blank=True,
        validators=[PHONE_VALIDATOR],
    )
    bio = models.TextField(_("Bio"), blank=True)
    profile_image_url = models.URLField(_("Profile image URL"), max_length=500, blank=True)
    language_preference = models.CharField(
        _("Language"),
        max_length=2,
        choices=Language.choices,
        default=Language.ARABIC,
    )
    is_host = models.BooleanField(_("Host"), default=False)
    is_verified = models.BooleanField(_("Verified"), default=False)
    failed_login_attempts = models.PositiveIntegerField(default=0)
    locked_until = models.DateTimeField(_("Locked until"), null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.username} <{self.email}>"

    def get_full_name(self) -> str:
        return self.full_name or self.username

    def get_short_name(self) -> str:
        return self.username

    # --- Login lockout ------------------------------------------------------
    @property
    def is_locked(self) -> bool:
        return bool(self.locked_until and self.locked_until > timezone.now())

    def lock(self, minutes: int | None = None) -> None:
        minutes = minutes or settings.LOGIN_LOCK_MINUTES
        self.locked_until = timezone.now() + timedelta(minutes=minutes)
        self.failed_login_attempts = 0
        self.save(update_fields=["locked_until", "failed_login_attempts"])

    def unlock(self) -> None:
        self.locked_until = None
        self.failed_login_attempts = 0
        self.save(update_fields=["locked_until", "failed_login_attempts"])

    def register_failed_attempt(self, threshold: int | None = None) -> None:
        threshold = threshold or settings.LOGIN_LOCK_THRESHOLD
        self.failed_login_attempts += 1
        if self.failed_login_attempts >= threshold:
            self.lock()
            return
        self.save(update_fields=["failed_login_attempts"])


User = CustomUser
