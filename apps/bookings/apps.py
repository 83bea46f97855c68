"""App configuration for bookings."""

from __future__ import annotations

from django.apps import AppConfig  # type: ignore


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    label = "bookings"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from .application import command_handlers, event_handlers

        command_handlers.register_handlers(message_bus)
        event_handlers.register_handlers(message_bus)
