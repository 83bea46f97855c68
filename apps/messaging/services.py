"""Messaging services: opening threads, posting and reading messages."""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import BusinessRuleError, ConflictError, PermissionDeniedError

from .models import Message, MessageThread

logger = logging.getLogger(__name__)


def get_or_create_thread(*, guest_id: int, host_id: int, property_id: int | None = None):
    """Return ``(thread, created)`` for the guest/host/property triple."""

    thread, created = MessageThread.objects.get_or_create(
        guest_id=guest_id,
        host_id=host_id,
        property_id=property_id,
    )
    if created:
        logger.info(f"Message thread {thread.pk} opened for guest {guest_id} and host {host_id}")
    return thread, created


def start_thread(actor, *, guest_id: int, host_id: int, property_id: int | None = None) -> MessageThread:
    """Explicitly open a thread the actor takes part in."""

    if actor.pk not in (guest_id, host_id):
        raise PermissionDeniedError(
            "You can only open threads you take part in.", error_code="NOT_A_PARTICIPANT"
        )
    if guest_id == host_id:
        raise BusinessRuleError("A thread needs two different participants.", error_code="SAME_PARTICIPANTS")

    thread, created = get_or_create_thread(guest_id=guest_id, host_id=host_id, property_id=property_id)
    if not created:
        raise ConflictError("A thread between these users already exists.", error_code="THREAD_EXISTS")
    return thread


def post_message(thread: MessageThread, sender, content: str) -> Message:
    """Add a message to ``thread``; the other participant receives it."""

    with transaction.atomic():
        message = Message.objects.create(
            thread=thread,
            sender=sender,
            recipient_id=thread.other_participant_id(sender.pk),
            content=content,
        )
        MessageThread.objects.filter(pk=thread.pk).update(
            last_message_at=message.created_at,
            last_message_preview=content[:200],
            updated_at=timezone.now(),
        )
    thread.last_message_at = message.created_at
    thread.last_message_preview = content[:200]
    return message


def mark_thread_read(thread: MessageThread, user) -> int:
    """Mark the messages addressed to ``user`` as read; returns how many changed."""

    return thread.messages.filter(recipient=user, is_read=False).update(
        is_read=True, read_at=timezone.now()
    )
