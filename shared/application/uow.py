"""
Unit of Work

Wraps one business operation in a database transaction and publishes
the domain events it recorded only after that transaction commits.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from django.db import transaction  # type: ignore

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        raise NotImplementedError

    @abstractmethod
    def rollback(self):
        raise NotImplementedError

    @abstractmethod
    def collect_events(self, aggregate):
        raise NotImplementedError


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = Booking.objects.create(...)
            booking.record_event(BookingRequested(...))
            uow.collect_events(booking)
        # the transaction commits here, events are published afterwards

    When entered inside an outer ``atomic`` block the work runs in a
    savepoint and publication waits for the outermost commit.
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def commit(self):
        logger.debug("Committing unit of work with %s events", len(self._events))
        events = self._events.copy()
        self._events.clear()
        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        if self._events:
            logger.warning("Rolling back unit of work, discarding %s events", len(self._events))
        self._events.clear()

    def collect_events(self, aggregate):
        """Move the recorded events of ``aggregate`` into this unit of work."""
        new_events = aggregate.events
        if new_events:
            self._events.extend(new_events)
            aggregate.clear_events()
            logger.debug(
                "Collected %s events from %s (pk=%s)",
                len(new_events), aggregate.__class__.__name__, aggregate.pk,
            )

    def _publish_events(self, events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info("Publishing %s domain events after commit", len(events))
        message_bus.publish_events(events)
