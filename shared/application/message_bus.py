"""
Message Bus

Routes commands to their single handler and domain events to any
number of subscribers. Apps register their handlers from
``AppConfig.ready``.
"""

from typing import Any, Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent
from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)


class MessageBus:
    """
    Commands: one handler per command type.
    Events: any number of handlers per event type.
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[Callable]] = {}
        self._command_handlers: Dict[Type, Callable] = {}

    def register_event_handler(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ):
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Registered event handler %s for %s", _name(handler), event_type.__name__)

    def register_command_handler(
        self,
        command_type: Type,
        handler: Callable[[Any], Any]
    ):
        """
        Register the handler of ``command_type``.

        Re-registering the same handler is a no-op (``ready()`` can run
        more than once); a different handler for a known command is a bug.
        """
        existing = self._command_handlers.get(command_type)
        if existing is not None and existing != handler:
            raise ValueError(
                f"Handler for {command_type.__name__} is already registered. "
                "Commands can have only one handler."
            )
        self._command_handlers[command_type] = handler
        logger.debug("Registered command handler for %s", command_type.__name__)

    def handle_command(self, command: Any) -> Any:
        """Run the handler registered for ``command`` and return its result."""
        command_type = type(command)
        handler = self._command_handlers.get(command_type)
        if handler is None:
            raise LookupError(f"No handler registered for command {command_type.__name__}")

        logger.info("Handling command %s", command_type.__name__)
        try:
            return handler(command)
        except DomainError as exc:
            logger.info(
                "Command %s rejected: %s (%s)", command_type.__name__, exc.message, exc.error_code
            )
            raise
        except Exception:
            logger.exception("Error handling command %s", command_type.__name__)
            raise

    def publish_events(self, events: List[DomainEvent]):
        """
        Deliver each event to its subscribers.

        Runs after commit, so a failing subscriber is logged and the
        remaining subscribers still receive the event.
        """
        for event in events:
            event_type = type(event)
            handlers = self._event_handlers.get(event_type, [])
            if not handlers:
                logger.debug("No handlers registered for event %s", event_type.__name__)
                continue

            logger.info("Publishing event %s (id=%s)", event_type.__name__, event.event_id)
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "Event handler %s failed for %s", _name(handler), event_type.__name__
                    )


def _name(handler: Callable) -> str:
    return getattr(handler, '__qualname__', handler.__class__.__name__)


message_bus = MessageBus()
