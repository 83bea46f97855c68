"""Messaging models for TripoStay.

A thread connects a guest and a host, optionally about one property.
Threads are opened explicitly or when a guest requests a stay that
needs the host's approval.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class MessageThreadQuerySet(models.QuerySet):
    def for_user(self, user):
        return self.filter(Q(guest=user) | Q(host=user))

    def by_latest_activity(self):
        return self.order_by(F("last_message_at").desc(nulls_last=True), "-created_at", "-id")


class MessageThread(models.Model):
    guest = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="guest_threads",
    )
    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="host_threads",
    )
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="message_threads",
    )
    last_message_at = models.DateTimeField(null=True, blank=True)
    last_message_preview = models.CharField(max_length=200, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MessageThreadQuerySet.as_manager()

    class Meta:
        verbose_name = _("Message thread")
        verbose_name_plural = _("Message threads")
        ordering = ["-last_message_at", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["guest", "host", "property"],
                name="message_thread_unique_participants",
            ),
            # NULL never equals NULL, so threads without a property need their own rule.
            models.UniqueConstraint(
                fields=["guest", "host"],
                condition=Q(property__isnull=True),
                name="message_thread_unique_participants_no_property",
            ),
            models.CheckConstraint(
                condition=~Q(guest=F("host")),
                name="message_thread_different_users",
            ),
        ]
        indexes = [
            models.Index(fields=["guest", "-last_message_at"]),
            models.Index(fields=["host", "-last_message_at"]),
        ]

    def __str__(self) -> str:
        return f"Thread {self.pk} between {self.guest_id} and {self.host_id}"

    def has_participant(self, user_id) -> bool:
        return user_id in (self.guest_id, self.host_id)

    def other_participant_id(self, user_id):
        return self.host_id if user_id == self.guest_id else self.guest_id

    def other_participant(self, user):
        return self.host if user.pk == self.guest_id else self.guest


class Message(models.Model):
    thread = models.ForeignKey(
        MessageThread,
        on_delete=models.CASCADE,
        related_name="messages",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
    )
    content = models.TextField()
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Message")
        verbose_name_plural = _("Messages")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["thread", "-created_at"]),
            models.Index(fields=["recipient", "is_read"]),
        ]

    def __str__(self) -> str:
        preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"Message from {self.sender_id} at {self.created_at}: {preview}"
