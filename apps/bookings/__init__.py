"""Bookings app package.

This app encapsulates the booking lifecycle: the Booking aggregate and its
state machine, the command handlers that drive it inside a unit of work,
and the periodic task that completes finished rentals. Dates are reserved
in the listing calendar on approval and released on cancellation or
completion.
"""
