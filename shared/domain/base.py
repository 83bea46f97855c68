"""
Base Domain Classes

- ValueObject: immutable objects compared by value
- DomainEvent: something that happened, published after commit
- EventRecorderMixin: lets Django models act as aggregate roots by
  recording events for the unit of work to collect
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from django.utils import timezone  # type: ignore


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass(kw_only=True)
class DomainEvent:
    """
    Base class for domain events

    Subclasses declare their payload as regular dataclass fields; the
    envelope fields below are keyword-only so the payload order is free.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=timezone.now)
    aggregate_id: Optional[int] = None


class EventRecorderMixin:
    """
    Aggregate-root behaviour for Django models

    Events are kept on the instance (not in the database) until the unit
    of work collects them.
    """

    def record_event(self, event: DomainEvent) -> None:
        if event.aggregate_id is None:
            event.aggregate_id = getattr(self, 'pk', None)
        self._pending_events().append(event)

    def clear_events(self) -> None:
        self._pending_events().clear()

    @property
    def events(self) -> List[DomainEvent]:
        return list(self._pending_events())

    def _pending_events(self) -> List[DomainEvent]:
        if '_domain_events' not in self.__dict__:
            self.__dict__['_domain_events'] = []
        return self.__dict__['_domain_events']
