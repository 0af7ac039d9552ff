"""Tests for the message bus and error rendering."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from django.test import SimpleTestCase

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent
from shared.domain.exceptions import (
    ConflictError,
    GatewayConfigurationError,
    GatewayError,
    NotFoundError,
    ValidationError,
)
from shared.infrastructure.api import domain_error_response
from apps.bookings.domain.entities import InvalidTransitionError


@dataclass(kw_only=True)
class Pinged(DomainEvent):
    pass


@dataclass
class Ping:
    value: int


def make_event() -> Pinged:
    return Pinged(booking_id=uuid4(), listing_id=uuid4(), renter_id=uuid4(), owner_id=uuid4())


class MessageBusTests(SimpleTestCase):
    def test_command_goes_to_its_single_handler(self) -> None:
        bus = MessageBus()
        bus.register_command_handler(Ping, lambda command: command.value * 2)

        self.assertEqual(bus.handle_command(Ping(21)), 42)

    def test_second_command_handler_is_refused(self) -> None:
        bus = MessageBus()
        bus.register_command_handler(Ping, lambda command: None)

        with self.assertRaises(ValueError):
            bus.register_command_handler(Ping, lambda command: None)

    def test_command_errors_propagate(self) -> None:
        bus = MessageBus()

        def fail(command):
            raise ValidationError("bad ping")

        bus.register_command_handler(Ping, fail)

        with self.assertRaises(ValidationError):
            bus.handle_command(Ping(1))

    def test_failing_subscriber_does_not_stop_the_others(self) -> None:
        bus = MessageBus()
        received = []

        def broken(event):
            raise RuntimeError("subscriber down")

        bus.register_event_handler(Pinged, broken)
        bus.register_event_handler(Pinged, received.append)
        event = make_event()

        bus.publish_events([event])

        self.assertEqual(received, [event])


class ErrorResponseTests(SimpleTestCase):
    def test_statuses_follow_error_class(self) -> None:
        self.assertEqual(domain_error_response(ValidationError("x")).status_code, 400)
        self.assertEqual(domain_error_response(NotFoundError("x")).status_code, 404)
        self.assertEqual(domain_error_response(InvalidTransitionError("x")).status_code, 409)

    def test_conflict_body_lists_dates(self) -> None:
        response = domain_error_response(ConflictError("taken", conflicting_dates=["2030-03-02"]))

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["conflicting_dates"], ["2030-03-02"])

    def test_gateway_error_is_retryable(self) -> None:
        response = domain_error_response(GatewayError("timeout"))

        self.assertEqual(response.status_code, 503)
        self.assertTrue(response.data["retryable"])

    def test_misconfigured_gateway_is_not_retryable(self) -> None:
        response = domain_error_response(GatewayConfigurationError("bad credentials"))

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data["error"], "gateway_misconfigured")
        self.assertFalse(response.data["retryable"])
