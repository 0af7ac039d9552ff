"""Payments app package.

Platform fee computation, payment orders and the adapter around the
external payment provider (PayPal). Captures are idempotent per order and
reconcile provider-side state after crashes.
"""
