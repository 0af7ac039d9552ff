"""
Unit of Work Pattern

Manages database transactions for a single booking transition. Domain events
collected from aggregates are appended to the event feed inside the
transaction and handed to the message bus only after commit.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Protocol
import logging

from django.db import transaction

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class EventStore(Protocol):
    def append(self, events: List[DomainEvent]) -> None:
        ...


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""

    @abstractmethod
    def collect_events(self, aggregate):
        """Collect events from aggregate root"""


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork(bus, event_store) as uow:
            booking = booking_repo.get_by_id(booking_id, lock=True)
            booking.approve(actor_id)
            uow.collect_events(booking)
            booking_repo.save(booking)
        # feed rows are committed with the booking, subscribers run after commit
    """

    def __init__(self, bus: MessageBus, event_store: Optional[EventStore] = None):
        self.bus = bus
        self.event_store = event_store
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        except Exception as error:
            # Feed write failed: the whole transition must roll back with it
            self.rollback()
            self._transaction.__exit__(type(error), error, error.__traceback__)
            self._transaction = None
            raise
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)
                self._transaction = None

    def commit(self):
        """
        Write the event feed and schedule publishing

        Events are published using transaction.on_commit() so subscribers
        never observe a transition that was rolled back.
        """
        events = self._events.copy()
        self._events.clear()
        logger.debug(f"Committing transaction with {len(events)} events")

        if not events:
            return

        if self.event_store is not None:
            self.event_store.append(events)

        transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        """Rollback changes and discard events"""
        if self._events:
            logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def collect_events(self, aggregate):
        """
        Collect events from aggregate root

        Extracts all domain events from the aggregate and clears them from it.
        """
        new_events = aggregate.events
        if new_events:
            self._events.extend(new_events)
            aggregate.clear_events()
            logger.debug(
                f"Collected {len(new_events)} events from "
                f"{aggregate.__class__.__name__} (ID: {aggregate.id})"
            )

    def _publish_events(self, events: List[DomainEvent]):
        logger.info(f"Publishing {len(events)} domain events after commit")
        self.bus.publish_events(events)
