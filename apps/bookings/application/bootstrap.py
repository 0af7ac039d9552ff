"""
Composition root for the booking core

Builds a MessageBus with every command handler and the default event
subscribers. Collaborators can be swapped for tests:

    bus = bootstrap(gateway=SandboxGateway(), today=lambda: date(2030, 1, 1))
    booking = bus.handle_command(RequestBookingCommand(...))
"""

from typing import Callable, Iterable, Optional, Tuple
import logging

from django.apps import apps as django_apps

from shared.application.message_bus import MessageBus
from apps.bookings.application import command_handlers as handlers
from apps.bookings.domain.events import BOOKING_EVENTS
from apps.bookings.repositories import DjangoBookingRepository
from apps.listings.services import AvailabilityIndex
from apps.notifications.services import DjangoEventStore, log_booking_event
from apps.payments.gateway import PaymentGateway
from apps.payments.services import PaymentService

logger = logging.getLogger(__name__)


def bootstrap(
    *,
    gateway: Optional[PaymentGateway] = None,
    today: Optional[Callable] = None,
    event_store=None,
    subscribers: Iterable[Tuple[type, Callable]] = (),
) -> MessageBus:
    """
    Wire the handlers and return a ready bus

    `subscribers` are extra (event type, handler) pairs, e.g. an external
    notification dispatcher.
    """
    bus = MessageBus()
    event_store = event_store if event_store is not None else DjangoEventStore()
    availability = AvailabilityIndex(today=today)
    payments = PaymentService(gateway if gateway is not None else django_apps.get_app_config("payments").get_gateway())
    bookings = DjangoBookingRepository()

    bus.register_command_handler(
        handlers.RequestBookingCommand,
        handlers.RequestBookingHandler(bus, event_store, bookings, availability),
    )
    bus.register_command_handler(
        handlers.DecideBookingCommand,
        handlers.DecideBookingHandler(bus, event_store, bookings, availability),
    )
    bus.register_command_handler(
        handlers.CreatePaymentOrderCommand,
        handlers.CreatePaymentOrderHandler(bus, event_store, bookings, payments, availability),
    )
    bus.register_command_handler(
        handlers.CaptureOrderCommand,
        handlers.CaptureOrderHandler(bus, event_store, bookings, payments),
    )
    bus.register_command_handler(
        handlers.CancelBookingCommand,
        handlers.CancelBookingHandler(bus, event_store, bookings, availability),
    )
    bus.register_command_handler(
        handlers.CompleteBookingCommand,
        handlers.CompleteBookingHandler(bus, event_store, bookings, availability),
    )

    bus.subscribe(BOOKING_EVENTS, log_booking_event)
    for event_type, handler in subscribers:
        bus.register_event_handler(event_type, handler)

    logger.debug(f"Message bus ready with gateway {payments.gateway.name}")
    return bus
