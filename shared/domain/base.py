"""
Base Domain Classes

Building blocks shared by the booking, availability and payment contexts:
- Entity: Objects with unique identity
- Aggregate: Consistency boundaries that collect domain events
- DomainEvent: Something that happened to a booking, published after commit
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List
from uuid import UUID, uuid4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Entity(ABC):
    """
    Base class for all entities

    Two entities are equal if their IDs are equal.
    """
    id: UUID = field(default_factory=uuid4)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass(eq=False)
class Aggregate(Entity):
    """
    Base class for aggregate roots

    Aggregates collect domain events during a transition. The unit of work
    drains them once the surrounding transaction is ready to commit.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False, compare=False)

    def add_event(self, event: 'DomainEvent'):
        """Add a domain event to be published"""
        self._events.append(event)

    def clear_events(self):
        """Clear all collected events (called after collection)"""
        self._events.clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Get copy of collected events"""
        return self._events.copy()


@dataclass(kw_only=True)
class DomainEvent:
    """
    Base class for booking lifecycle events

    Every event names the booking it belongs to together with the listing,
    renter and owner so subscribers never need to load the booking back.
    """
    booking_id: UUID
    listing_id: UUID
    renter_id: UUID
    owner_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utcnow)

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def payload(self) -> dict:
        """Event specific attributes, serialized for the feed"""
        return {}

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.event_type,
            'occurred_at': self.occurred_at.isoformat(),
            'booking_id': str(self.booking_id),
            'listing_id': str(self.listing_id),
            'renter_id': str(self.renter_id),
            'owner_id': str(self.owner_id),
            'payload': self.payload(),
        }
