"""Admin registration for messaging."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Message, MessageThread


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ("sender", "recipient", "content", "is_read", "created_at")
    readonly_fields = ("created_at",)


@admin.register(MessageThread)
class MessageThreadAdmin(admin.ModelAdmin):
    list_display = ("id", "guest", "host", "property", "last_message_at", "created_at")
    search_fields = ("guest__email", "host__email", "property__title")
    readonly_fields = ("last_message_at", "last_message_preview", "created_at", "updated_at")
    inlines = [MessageInline]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("id", "thread", "sender", "recipient", "is_read", "created_at")
    list_filter = ("is_read",)
    search_fields = ("content", "sender__email", "recipient__email")
