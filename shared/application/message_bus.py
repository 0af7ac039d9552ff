"""
Message Bus

Routes booking commands to their single handler and fans published
lifecycle events out to every subscriber. The bus is built by
`apps.bookings.application.bootstrap` and passed around explicitly.
"""

from typing import Any, Callable, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Message bus for commands and events

    Commands: One handler per command (1:1)
    Events: Multiple handlers per event (1:N)
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}
        self._command_handlers: Dict[Type, Callable] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """Multiple handlers can be registered for the same event type."""
        self._event_handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Registered event handler for {event_type.__name__}")

    def subscribe(self, event_types: Iterable[Type[DomainEvent]], handler: EventHandler):
        """Register one handler for several event types"""
        for event_type in event_types:
            self.register_event_handler(event_type, handler)

    def register_command_handler(self, command_type: Type, handler: Callable[[Any], Any]):
        """Only one handler can be registered per command type."""
        if command_type in self._command_handlers:
            raise ValueError(
                f"Handler for {command_type.__name__} is already registered. "
                "Commands can have only one handler."
            )
        self._command_handlers[command_type] = handler
        logger.debug(f"Registered command handler for {command_type.__name__}")

    def handle_command(self, command: Any) -> Any:
        """
        Handle a command

        Returns the result from the command handler. Domain errors raised by
        the handler propagate to the caller unchanged.
        """
        command_type = type(command)
        handler = self._command_handlers.get(command_type)

        if not handler:
            raise ValueError(f"No handler registered for command {command_type.__name__}")

        logger.info(f"Handling command: {command_type.__name__}")
        try:
            result = handler(command)
        except Exception as e:
            logger.warning(f"Command {command_type.__name__} failed: {e.__class__.__name__}: {e}")
            raise
        logger.debug(f"Command {command_type.__name__} handled successfully")
        return result

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events in the order they were raised

        Errors in handlers are logged but don't stop other handlers.
        """
        for event in events:
            handlers = self._event_handlers.get(type(event), [])

            if not handlers:
                logger.debug(f"No handlers registered for event {event.event_type}")
                continue

            logger.info(
                f"Publishing event: {event.event_type} "
                f"(booking {event.booking_id}, ID: {event.event_id})"
            )

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Error in event handler {getattr(handler, '__name__', handler)} "
                        f"for event {event.event_type}: {e}",
                        exc_info=True,
                    )
