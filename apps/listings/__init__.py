"""Listings app package.

Listings themselves are owned by the marketplace catalogue; this app keeps
the read-only reference row the booking core needs (owner, daily price,
payee) and the per-listing availability calendar of unavailable days.
"""
